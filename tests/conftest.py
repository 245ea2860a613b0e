from __future__ import annotations

import sys
from pathlib import Path

import pytest


SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


@pytest.fixture
def listing():
    return {
        "id": 4123,
        "title": "BMW 320d Touring M Sport",
        "brand": "BMW",
        "model": "320",
        "sellerId": 98765,
        "url": "https://suchen.mobile.de/fahrzeuge/details.html?id=4123",
        "price": {"amount": 20000, "currency": "EUR", "withoutVAT": {"amount": 16806.72}},
        "images": [{"url": "https://img.example/1.jpg"}, {"url": "https://img.example/2.jpg"}],
        "features": ["ABS", "Front wheel drive", "Four wheel drive"],
        "attributes": [
            {"name": "Vehicle condition", "value": "Used vehicle"},
            {"name": "Power", "value": "140 kW (190 hp)"},
            {"name": "Cubic Capacity", "value": "1,995 ccm"},
            {"name": "Colour", "value": "Black"},
            {"name": "HU", "value": "New"},
        ],
        "dealerDetails": '{"name": "Auto Haus", "city": "Berlin", "phone": "+49 30 1234"}',
    }
