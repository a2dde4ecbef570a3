"""
Amenity vocabulary for spaces.

Each amenity has a display label, an icon and a short description. The tag
picker and the spaces table use this table to render amenity names; names
that are not listed here are shown as plain text.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class AmenityConfig:
    name: str
    label: str
    icon: str
    description: str
    category: str


_AMENITIES: List[AmenityConfig] = [
    # connectivity
    AmenityConfig("wifi", "High-speed WiFi", "📶", "Reliable fibre internet throughout the space", "connectivity"),
    AmenityConfig("backup_power", "Backup Power", "🔋", "Generator or UPS keeps you online during outages", "connectivity"),
    AmenityConfig("ethernet", "Ethernet Ports", "🔌", "Wired connections at selected desks", "connectivity"),
    # workspace
    AmenityConfig("meeting_rooms", "Meeting Rooms", "👥", "Bookable rooms for calls and team sessions", "workspace"),
    AmenityConfig("phone_booths", "Phone Booths", "📞", "Soundproof booths for private calls", "workspace"),
    AmenityConfig("standing_desks", "Standing Desks", "🧍", "Height-adjustable desks", "workspace"),
    AmenityConfig("ergonomic_chairs", "Ergonomic Chairs", "🪑", "Comfortable chairs for long working days", "workspace"),
    AmenityConfig("printer", "Printer & Scanner", "🖨️", "Printing, copying and scanning on site", "workspace"),
    AmenityConfig("lockers", "Lockers", "🔐", "Secure storage for your belongings", "workspace"),
    AmenityConfig("access_24_7", "24/7 Access", "🕐", "Work any time of day or night", "workspace"),
    # comfort
    AmenityConfig("air_conditioning", "Air Conditioning", "❄️", "Climate-controlled work areas", "comfort"),
    AmenityConfig("coffee", "Free Coffee", "☕", "Unlimited coffee and tea", "comfort"),
    AmenityConfig("kitchen", "Shared Kitchen", "🍳", "Fully equipped kitchen for members", "comfort"),
    AmenityConfig("cafe", "On-site Cafe", "🥐", "Food and drinks available on the premises", "comfort"),
    AmenityConfig("outdoor_area", "Outdoor Area", "🌴", "Garden or terrace for working outside", "comfort"),
    AmenityConfig("pool", "Swimming Pool", "🏊", "Pool access for members and residents", "comfort"),
    AmenityConfig("gym", "Gym", "🏋️", "Fitness equipment on site", "comfort"),
    # living
    AmenityConfig("laundry", "Laundry", "🧺", "Washing machines or laundry service", "living"),
    AmenityConfig("private_rooms", "Private Rooms", "🛏️", "Private bedrooms for coliving guests", "living"),
    AmenityConfig("cleaning", "Cleaning Service", "🧹", "Regular housekeeping", "living"),
    # access
    AmenityConfig("parking", "Parking", "🅿️", "Parking for cars or scooters", "access"),
    AmenityConfig("bike_storage", "Bike Storage", "🚲", "Secure bicycle parking", "access"),
    AmenityConfig("wheelchair_access", "Wheelchair Access", "♿", "Step-free access to the main areas", "access"),
    # community
    AmenityConfig("community_events", "Community Events", "🎉", "Regular meetups, workshops and socials", "community"),
    AmenityConfig("pet_friendly", "Pet Friendly", "🐾", "Well-behaved pets are welcome", "community"),
]

AMENITY_CONFIG: Dict[str, AmenityConfig] = {amenity.name: amenity for amenity in _AMENITIES}


def get_amenity_config(name: str) -> Optional[AmenityConfig]:
    """Look up an amenity by name; unknown names return None."""
    return AMENITY_CONFIG.get(name)


def get_available_amenities() -> List[str]:
    """All amenity names in display order."""
    return [amenity.name for amenity in _AMENITIES]


def get_amenities_by_category() -> Dict[str, List[AmenityConfig]]:
    grouped: Dict[str, List[AmenityConfig]] = {}
    for amenity in _AMENITIES:
        grouped.setdefault(amenity.category, []).append(amenity)
    return grouped


def format_amenity(name: str, with_description: bool = False) -> str:
    """
    Render an amenity for display: "icon label" for known names, with the
    description appended on request, and the raw name for unknown ones.
    """
    config = get_amenity_config(name)
    if config is None:
        return name
    text = f"{config.icon} {config.label}"
    if with_description:
        text = f"{text} - {config.description}"
    return text
