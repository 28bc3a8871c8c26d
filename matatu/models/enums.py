import enum

class UserRole(str, enum.Enum):
    driver = "driver"
    commuter = "commuter"
    admin = "admin"

class AlertType(str, enum.Enum):
    traffic_jam = "traffic_jam"
    accident = "accident"
    road_closure = "road_closure"
    weather_warning = "weather_warning"
    police_checkpoint = "police_checkpoint"
    route_diversion = "route_diversion"
    other = "other"

class SeverityLevel(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"

class RatingSort(str, enum.Enum):
    newest = "newest"
    highest = "highest"
    lowest = "lowest"


def enum_values(enum_cls) -> list:
    return [m.value for m in enum_cls]
