import copy
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest


SAMPLE_PAYLOAD = {
    "branding": {
        "paleta": ["#0A2540", "#C9A43F"],
        "tipografia": "Sans-serif bold",
        "efeitos": ["gold gradient"],
    },
    "elementos": {
        "objetosCentrais": ["titanium implant"],
        "tratamentoVisual": "sharp specular highlight",
    },
    "informacoes": {
        "headline": "Precision Redefined",
        "subheadline": "",
        "cta": "Book a demo",
        "outrosTextos": [],
    },
    "diagramacao": {
        "grid": "12-col left-aligned",
        "alinhamento": "left",
        "posicionamento": ["logo top-left"],
    },
    "materiais": {
        "sugestoesRepositorio": ["implants/titanium_01.png"],
    },
    "explicacao_tecnica": "Gold-on-navy establishes premium contrast.",
}

# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6300010000000500010d0a2db40000"
    "000049454e44ae426082"
)


@pytest.fixture
def sample_payload():
    return copy.deepcopy(SAMPLE_PAYLOAD)


@pytest.fixture
def png_file(tmp_path):
    path = tmp_path / "sample.png"
    path.write_bytes(PNG_BYTES)
    return path
