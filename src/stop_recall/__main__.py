from stop_recall.server import main

main()
