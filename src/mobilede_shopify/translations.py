"""Romanian display strings for mobile.de attribute names, values and features.

Only common keys are listed; lookups fall back to the original English text.
"""
from __future__ import annotations
from types import MappingProxyType
from typing import Any, Tuple

from .coerce import to_text


ATTR_TRANSLATIONS = MappingProxyType({
    "Vehicle condition": "Stare vehicul",
    "Category": "Categorie",
    "Model range": "Gamă model",
    "Trim line": "Nivel echipare",
    "Vehicle Number": "Număr vehicul",
    "Availability": "Disponibilitate",
    "Origin": "Origine",
    "Mileage": "Kilometraj",
    "Cubic Capacity": "Capacitate cilindrică",
    "Power": "Putere",
    "Drive type": "Tip tracțiune",
    "Fuel": "Combustibil",
    "Number of Seats": "Număr de locuri",
    "Door Count": "Număr uși",
    "Sliding door": "Ușă culisantă",
    "Transmission": "Transmisie",
    "Emission Class": "Clasă de emisii",
    "Emissions Sticker": "Etichetă emisii",
    "First Registration": "Prima înmatriculare",
    "Number of Vehicle Owners": "Număr de proprietari",
    "HU": "ITP",
    "Climatisation": "Climatizare",
    "Parking sensors": "Senzori parcare",
    "Airbags": "Airbaguri",
    "Colour (Manufacturer)": "Culoare (producător)",
    "Colour": "Culoare",
    "Interior Design": "Design interior",
    "Energy consumption (comb.)": "Consum de energie (comb.)",
    "CO₂ emissions (comb.)": "Emisii CO₂ (comb.)",
    "Trailer load braked": "Sarcină remorcă frânată",
    "Trailer load unbraked": "Sarcină remorcă nefrânată",
    "Weight": "Greutate",
    "Last service (mileage)": "Ultimul service (kilometraj)",
    "Cylinders": "Cilindri",
    "Tank capacity": "Capacitate rezervor",
})

FEATURE_TRANSLATIONS = MappingProxyType({
    "ABS": "ABS",
    "Adaptive Cruise Control": "Control adaptiv al vitezei",
    "Adaptive lighting": "Iluminare adaptivă",
    "Alarm system": "Sistem de alarmă",
    "Alloy wheels": "Jante din aliaj",
    "Arm rest": "Cotieră",
    "Bi-xenon headlights": "Faruri bi-xenon",
    "Bluetooth": "Bluetooth",
    "Cargo barrier": "Barieră pentru bagaje",
    "CD player": "CD player",
    "Central locking": "Închidere centralizată",
    "Cruise control": "Pilot automat",
    "Distance warning system": "Sistem avertizare distanță",
    "Electric seat adjustment": "Reglaj electric scaune",
    "Electric windows": "Geamuri electrice",
    "Emergency brake assist": "Asistență frânare de urgență",
    "ESP": "ESP",
    "Front wheel drive": "Tracțiune față",
    "Hands-free kit": "Set mâini libere",
    "Headlight washer system": "Sistem spălare faruri",
    "Heated seats": "Scaune încălzite",
    "Hill-start assist": "Asistență la pornirea în rampă",
    "Immobilizer": "Imobilizator",
    "Isofix": "Isofix",
    "Leather steering wheel": "Volan îmbrăcat în piele",
    "LED running lights": "Lumini de zi LED",
    "Light sensor": "Senzor lumină",
    "Lumbar support": "Suport lombar",
    "Massage seats": "Scaune masaj",
    "Multifunction steering wheel": "Volan multifuncțional",
    "Navigation system": "Sistem de navigație",
    "On-board computer": "Computer de bord",
    "Panoramic roof": "Plafon panoramic",
    "Passenger seat Isofix point": "Punct Isofix pentru scaun pasager",
    "Power Steering": "Servodirecție",
    "Rain sensor": "Senzor de ploaie",
    "Roof rack": "Portbagaj pe acoperiș",
    "Ski bag": "Sac pentru schiuri",
    "Sound system": "Sistem audio",
    "Speed limit control system": "Sistem control limită viteză",
    "Sunroof": "Trapă",
    "Tinted windows": "Geamuri fumurii",
    "Touchscreen": "Ecran tactil",
    "Traction control": "Control tracțiune",
    "Traffic sign recognition": "Recunoaștere indicatoare",
    "Tuner/radio": "Radio",
    "Tyre pressure monitoring": "Monitorizare presiune anvelope",
    "USB port": "Port USB",
    "Winter package": "Pachet de iarnă",
})

VALUE_TRANSLATIONS = MappingProxyType({
    "Used vehicle": "Vehicul folosit",
    "Accident-free": "Fără accident",
    "Saloon": "Sedan",
    "Cabriolet / Roadster": "Cabriolet / Roadster",
    "Estate car": "Break",
    "Van / Minibus": "Van / Microbuz",
    "Now": "Acum",
    "German edition": "Ediție germană",
    "Internal combustion engine": "Motor cu combustie internă",
    "Petrol": "Benzină",
    "Diesel": "Diesel",
    "Petrol, E10-enabled": "Benzină, compatibil E10",
    "Automatic": "Automată",
    "Automatic gearbox": "Automată",
    "Manual gearbox": "Manuală",
    "Manual": "Manuală",
    "Automatic climatisation, 2 zones": "Climatizare automată, 2 zone",
    "Automatic climatisation, 3 zones": "Climatizare automată, 3 zone",
    "Automatic air conditioning": "Aer condiționat automat",
    "Rear, Front": "Spate, Față",
    "Rear, Camera, Front": "Spate, Cameră, Față",
    "Driver Airbag": "Airbag șofer",
    "Front and Side Airbags": "Airbaguri frontale și laterale",
    "Front and Side and More Airbags": "Airbaguri frontale, laterale și altele",
    "Pure White": "Alb Pur",
    "Black Metallic": "Negru Metalic",
    "Brown Metallic": "Maro Metalic",
    "Blue": "Albastru",
    "Red": "Roșu",
    "Brown": "Maro",
    "White": "Alb",
    "Black": "Negru",
    "Cloth, Black": "Textil, Negru",
    "Cloth, Brown": "Textil, Maro",
    "Full leather, Beige": "Piele integrală, Bej",
    "Full leather, Brown": "Piele integrală, Maro",
    "Full leather, Other": "Piele integrală, Alte",
    "Euro5": "Euro5",
    "Euro6": "Euro6",
    "4 (Green)": "4 (Verde)",
    "New": "Nou",
    "Used": "Folosit",
    # single-word drive type / parking sensor positions
    "Internal": "Intern",
    "Front": "Față",
    "Rear": "Spate",
    "Camera": "Cameră",
})

# Values of these attributes are never translated
COLOUR_ATTRIBUTES = frozenset({"Colour", "Colour (Manufacturer)"})

# Scanned in order against each feature; first match wins
DRIVE_TRAIN_CODES: Tuple[Tuple[str, str], ...] = (
    ("rear wheel drive", "4x2 (RWD)"),
    ("front wheel drive", "2x4 (FWD)"),
    ("four-wheel drive", "4x4 (AWD)"),
    ("four wheel drive", "4x4 (AWD)"),
)


def translate_attribute_name(name: str) -> str:
    return ATTR_TRANSLATIONS.get(name, name)


def translate_feature(feature: str) -> str:
    return FEATURE_TRANSLATIONS.get(feature, feature)


def translate_value(value: str, attribute_name: str = "") -> str:
    if attribute_name in COLOUR_ATTRIBUTES:
        return value
    return VALUE_TRANSLATIONS.get(value, value)


def translate_value_text(value: Any, attribute_name: str = "") -> str:
    """Render a full attribute value for the description.

    Arrays are translated element by element. Comma-separated strings
    without a whole-value translation are translated part by part.
    """
    skip = attribute_name in COLOUR_ATTRIBUTES
    if isinstance(value, list):
        parts = [to_text(v).strip() for v in value]
        return ", ".join(p if skip else VALUE_TRANSLATIONS.get(p, p) for p in parts)
    text = to_text(value).strip()
    if skip:
        return text
    if text in VALUE_TRANSLATIONS:
        return VALUE_TRANSLATIONS[text]
    if "," in text:
        parts = [p.strip() for p in text.split(",")]
        return ", ".join(VALUE_TRANSLATIONS.get(p, p) for p in parts)
    return text


def drive_train_code(feature: str) -> str:
    txt = feature.strip().lower()
    for phrase, code in DRIVE_TRAIN_CODES:
        if txt == phrase:
            return code
    return ""
