"""
Example input files for each mode, offered as downloadable templates.
"""

from pathlib import Path
from typing import Dict, Tuple, Union

from tarifcheck.engine.models import ReconMode

IT = "IT"
MASTER = "MASTER"

TEMPLATES: Dict[Tuple[ReconMode, str], str] = {
    (ReconMode.TARIF, IT): (
        "ORIGIN,DEST,SYS_CODE,SERVICE,TARIF,SLA_FORM,SLA_THRU\n"
        "MES10612,AMI10000,MES10612AMI10000,REG23,59000,3,5"
    ),
    (ReconMode.TARIF, MASTER): (
        "ORIGIN,DEST,SYS_CODE,Service REG,Tarif REG,sla form REG,sla thru REG\n"
        "DJJ10000,AMI10000,DJJ10000AMI10000,REG23,107000,4,5"
    ),
    (ReconMode.BIAYA, IT): (
        "ORIGIN,DESTINASI,SERVICE,BT,BD,BD NEXT,BP,BP NEXT\n"
        "AMI20100,BDJ10502,REG23,1500,3200,0,0,0"
    ),
    (ReconMode.BIAYA, MASTER): (
        "DESTINASI,ZONA,BP OKE23,BP NEXT OKE23,BT OKE23,BD OKE23,"
        "BP REG23,BP NEXT REG23,BT REG23,BD REG23,BD NEXT REG23\n"
        "AMI10000,A,1500,0,1200,3200,2000,0,1500,3500,0"
    ),
}


def _side(side: str) -> str:
    side = side.strip().upper()
    if side not in (IT, MASTER):
        raise ValueError(f"Unknown template side: {side} (expected IT or MASTER)")
    return side


def template_filename(mode: Union[ReconMode, str], side: str) -> str:
    mode = ReconMode.parse(mode)
    if _side(side) == IT:
        return f"Template_Data_IT_{mode.value}.csv"
    return f"Template_Master_Data_{mode.value}.csv"


def template_content(mode: Union[ReconMode, str], side: str) -> str:
    return TEMPLATES[(ReconMode.parse(mode), _side(side))]


def write_template(mode: Union[ReconMode, str], side: str, output_dir: Path) -> Path:
    """Write a template CSV into output_dir and return its path."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / template_filename(mode, side)
    path.write_text(template_content(mode, side), encoding="utf-8")
    return path
