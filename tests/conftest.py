"""Shared sample dataset for loader, provider and game tests."""

from pathlib import Path

import pytest

from stop_recall.data.dataset_loader import DatasetLoader

LINES_CSV = (
    "ref,name,color_hex,network,geojson\n"
    "T1,Tram T1,#E2001A,tram,\n"
    "T2,Tram T2,#0069B4,tram,\n"
    "3,Ligne 3,#00A0E2,bus,\n"
    "104,Ligne 104,#7A7A7A,bus,\n"
)

STOPS_CSV = (
    "id,name,aliases,lat,lon,line_ref,network,operator,stop_group\n"
    "1,Théâtre,,49.1829,-0.3707,T1,tram,Twisto,1\n"
    "2,Théâtre - Quai 2,Théâtre,49.1830,-0.3709,T1,tram,Twisto,1\n"
    "3,Hôtel de Ville,Mairie de Caen,49.1810,-0.3740,T1,tram,Twisto,2\n"
    "4,Tour Leroy,,49.1850,-0.3650,T2,tram,Twisto,\n"
    "5,Gare SNCF,Gare|Gare de Caen,49.1770,-0.3480,T2,tram,Twisto,\n"
    "6,Place Courtonne,,49.1860,-0.3580,3,bus,Twisto,3\n"
    "7,Université,Campus 1,49.1950,-0.3690,3,bus,Twisto,\n"
    "8,Hérouville Mairie,,49.2030,-0.3260,104,bus,Twisto,\n"
    "9,,,49.0,-0.3,3,bus,Twisto,\n"
    "10,Quai Ouest,,49.0,-0.3,3,metro,Twisto,\n"
    "11,Théâtre,,49.1829,-0.3707,3,bus,Twisto,1\n"
    "12,Quatrans,,49.1840,-0.3620,3,bus,Twisto,\n"
    "13,Saint-Pierre,,49.1845,-0.3610,3,bus,Twisto,\n"
    "14,Bellivet,,49.1870,-0.3550,3,bus,Twisto,\n"
    "15,Chemin Vert,,49.1990,-0.3860,3,bus,Twisto,\n"
)


@pytest.fixture
def sample_dataset_dir(tmp_path: Path) -> Path:
    """Create a sample dataset directory with stops.csv and lines.csv."""
    dataset_dir = tmp_path / "dataset"
    dataset_dir.mkdir()
    (dataset_dir / "lines.csv").write_text(LINES_CSV, encoding="utf-8")
    (dataset_dir / "stops.csv").write_text(STOPS_CSV, encoding="utf-8")
    return dataset_dir


@pytest.fixture
async def db_path(sample_dataset_dir: Path, tmp_path: Path) -> Path:
    """Create a test database from the sample dataset."""
    db_file = tmp_path / "stops.db"
    loader = DatasetLoader(db_file)
    await loader.ingest(sample_dataset_dir)
    return db_file
