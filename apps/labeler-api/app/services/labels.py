"""Fixed vocabularies shared by the map renderer and the annotation session."""

SUBSTATION_TYPES = [
    "Transmission",
    "Distribution",
    "Industrial owned",
    "Customer Owned",
    "Sub-transmission station",
    "Switching station",
    "Gas Insulated Substation",
    "Other",
]

OTHER_TYPE = "Other"

COMPONENT_OPTIONS = [
    "Power Compensator",
    "Power Transformer",
    "Power Generator",
    "Power Line",
    "Power Plant",
    "Power Switch",
    "Power Tower",
    "Circuit switch",
    "Circuit breaker",
    "High side power area",
    "Capacitor bank",
    "Battery bank",
    "Bus bar",
    "Control house",
    "Spare equipment",
    "Vehicles",
    "Tripolar disconnect switch",
    "Recloser",
    "Fuse disconnect switch",
    "Closed blade disconnect switch",
    "Current transformer",
    "Open blade disconnect switch",
    "Closed tandem disconnect switch",
    "Open tandem disconnect switch",
    "Lightning arrester",
    "Glass disc insulator",
    "Potential transformer",
    "Muffle",
]

LABEL_COLORS = {
    "Power Compensator": "#00AAFF",
    "Power Transformer": "#FF00AA",
    "Power Generator": "#FFD700",
    "Power Line": "#ffa500",
    "Power Plant": "#800080",
    "Power Switch": "#DC143C",
    "Power Tower": "#0000FF",
}

# The substation outline travels through the map as a pseudo-annotation
BOUNDARY_LABEL = "power_substation_polygon"

BOUNDARY_COLOR = "red"
CONFIRMED_COLOR = "green"
PENDING_COLOR = "yellow"
DEFAULT_COLOR = "blue"
