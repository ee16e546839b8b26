from enum import Enum


class UserRole(str, Enum):
    CUSTOMER = "customer"
    PROVIDER = "provider"
    ADMIN = "admin"

    def __str__(self):
        return self.value


class ServiceType(str, Enum):
    # Emergency services
    FUEL = "fuel"
    BATTERY = "battery"
    TIRE = "tire"
    TOW = "tow"
    LOCKOUT = "lockout"
    # Fitment services
    DASHCAM = "dashcam"
    MULTIMEDIA = "multimedia"
    FITMENT = "fitment"
    # General repair services
    INSPECTION = "inspection"
    REPAIR = "repair"
    BIKE_SERVICE = "bike_service"
    OTHER = "other"

    def __str__(self):
        return self.value


class ServiceStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def __str__(self):
        return self.value


class FuelType(str, Enum):
    PETROL = "petrol"
    DIESEL = "diesel"
    CNG = "cng"

    def __str__(self):
        return self.value


class BatteryIssue(str, Enum):
    DEAD_BATTERY = "dead_battery"
    CORRODED_TERMINALS = "corroded_terminals"
    FAULTY_ALTERNATOR = "faulty_alternator"
    OTHER = "other"

    def __str__(self):
        return self.value


class TireIssue(str, Enum):
    FLAT_TIRE = "flat_tire"
    PUNCTURE = "puncture"
    BLOWOUT = "blowout"
    OTHER = "other"

    def __str__(self):
        return self.value


class TireLocation(str, Enum):
    FRONT_LEFT = "front_left"
    FRONT_RIGHT = "front_right"
    REAR_LEFT = "rear_left"
    REAR_RIGHT = "rear_right"
    SPARE = "spare"

    def __str__(self):
        return self.value


class TowReason(str, Enum):
    ACCIDENT = "accident"
    MECHANICAL_FAILURE = "mechanical_failure"
    ILLEGAL_PARKING = "illegal_parking"
    OTHER = "other"

    def __str__(self):
        return self.value


class DestinationType(str, Enum):
    REPAIR_SHOP = "repair_shop"
    HOME = "home"
    DEALER = "dealer"
    OTHER = "other"

    def __str__(self):
        return self.value


class LockoutType(str, Enum):
    KEYS_LOCKED_IN = "keys_locked_in"
    LOST_KEYS = "lost_keys"
    BROKEN_KEY = "broken_key"
    FAULTY_LOCK = "faulty_lock"
    OTHER = "other"

    def __str__(self):
        return self.value
