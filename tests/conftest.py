"""
Shared pytest fixtures for tarifcheck tests.

Provides CSV file writers, configuration and sample datasets.
"""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tarifcheck.core.config import ReconConfig


TARIF_MASTER_CSV = (
    "ORIGIN,DEST,SYS_CODE,Service REG,Tarif REG,sla form REG,sla thru REG\n"
    "DJJ10000,AMI10000,DJJ10000AMI10000,REG23,107000,4,5\n"
    "MES10612,AMI10000,MES10612AMI10000,REG23,59000,3,5\n"
    "CGK10000,BDO10000,CGK10000BDO10000,REG23,12000,1,2\n"
)

TARIF_IT_CSV = (
    "ORIGIN,DEST,SYS_CODE,SERVICE,TARIF,SLA_FORM,SLA_THRU\n"
    "MES10612,AMI10000,mes10612ami10000,REG23,\"59,000\",3,5\n"
    "DJJ10000,AMI10000,DJJ10000AMI10000,REG23,100000,4,5\n"
    "SUB10000,AMI10000,SUB10000AMI10000,REG23,80000,2,3\n"
)

BIAYA_MASTER_CSV = (
    "DESTINASI,ZONA,BP OKE23,BP NEXT OKE23,BT OKE23,BD OKE23,"
    "BP REG23,BP NEXT REG23,BT REG23,BD REG23,BD NEXT REG23\n"
    "AMI10000,A,1500,0,1200,3200,2000,0,1500,3500,0\n"
    "BDJ10502,B,1000,0,900,2500,1800,0,1500,3200,0\n"
)

BIAYA_IT_CSV = (
    "ORIGIN,DESTINASI,SERVICE,BT,BD,BD NEXT,BP,BP NEXT\n"
    "AMI20100,BDJ10502,REG23,1500,3200,0,1800,0\n"
    "AMI20100,AMI10000,REG23,1500,3500,0,1999,0\n"
    "AMI20100,XXX99999,REG23,1500,3200,0,0,0\n"
)


@pytest.fixture
def write_csv(tmp_path):
    """Write text to a CSV file under tmp_path and return its path."""
    counter = {"n": 0}

    def _write(content: str, name: str = None, encoding: str = "utf-8") -> Path:
        counter["n"] += 1
        path = tmp_path / (name or f"data_{counter['n']}.csv")
        path.write_bytes(content.encode(encoding))
        return path

    return _write


@pytest.fixture
def config():
    """Default configuration."""
    return ReconConfig()


@pytest.fixture
def small_chunk_config():
    """Configuration with tiny windows so every file spans many chunks."""
    data = ReconConfig().to_dict()
    data["reader"]["chunk_size"] = 7
    return ReconConfig(data)


@pytest.fixture
def tarif_files(write_csv):
    """(master, it) paths for TARIF mode."""
    return write_csv(TARIF_MASTER_CSV, "master_tarif.csv"), write_csv(TARIF_IT_CSV, "it_tarif.csv")


@pytest.fixture
def biaya_files(write_csv):
    """(master, it) paths for BIAYA mode."""
    return write_csv(BIAYA_MASTER_CSV, "master_biaya.csv"), write_csv(BIAYA_IT_CSV, "it_biaya.csv")
