# Major international hub airports considered for one-stop connections.
HUB_AIRPORTS = (
    "DXB",  # Dubai
    "IST",  # Istanbul
    "DOH",  # Doha
    "AMS",  # Amsterdam
    "FRA",  # Frankfurt
    "CDG",  # Paris
    "LHR",  # London Heathrow
    "MAD",  # Madrid
    "FCO",  # Rome
    "MUC",  # Munich
    "JFK",  # New York JFK
    "ORD",  # Chicago
    "DFW",  # Dallas
    "ATL",  # Atlanta
    "LAX",  # Los Angeles
    "SFO",  # San Francisco
    "SIN",  # Singapore
    "HKG",  # Hong Kong
    "ICN",  # Seoul
    "NRT",  # Tokyo Narita
    "BKK",  # Bangkok
    "KUL",  # Kuala Lumpur
)

MAJOR_HUBS = frozenset({"DXB", "IST", "DOH", "AMS", "FRA", "LHR", "SIN"})
EUROPEAN_HUBS = frozenset({"AMS", "FRA", "CDG", "LHR", "MAD", "FCO", "MUC"})
US_HUBS = frozenset({"JFK", "ORD", "DFW", "ATL", "LAX", "SFO"})
ASIAN_HUBS = frozenset({"SIN", "HKG", "ICN", "NRT", "BKK", "KUL"})
MIDDLE_EAST_HUBS = frozenset({"DXB", "IST", "DOH"})

# Metropolitan city codes and the airports they cover.
CITY_CODE_ALIASES = {
    "NYC": frozenset({"JFK", "LGA", "EWR"}),
    "LON": frozenset({"LHR", "LGW", "STN", "LTN", "LCY", "SEN"}),
    "PAR": frozenset({"CDG", "ORY", "BVA"}),
    "MIL": frozenset({"MXP", "LIN", "BGY"}),
    "ROM": frozenset({"FCO", "CIA"}),
    "STO": frozenset({"ARN", "BMA", "NYO"}),
    "MOW": frozenset({"SVO", "DME", "VKO"}),
    "CHI": frozenset({"ORD", "MDW"}),
    "WAS": frozenset({"IAD", "DCA", "BWI"}),
    "YTO": frozenset({"YYZ", "YTZ"}),
    "TYO": frozenset({"NRT", "HND"}),
    "OSA": frozenset({"KIX", "ITM"}),
    "SEL": frozenset({"ICN", "GMP"}),
    "BJS": frozenset({"PEK", "PKX"}),
    "SAO": frozenset({"GRU", "CGH", "VCP"}),
    "BUE": frozenset({"EZE", "AEP"}),
}

# Layover bounds in seconds (both inclusive).
MIN_LAYOVER_SECONDS = 45 * 60
MAX_LAYOVER_SECONDS = 24 * 60 * 60

# Onward departures from a hub must leave at least this long after arrival.
MIN_HUB_CONNECTION_SECONDS = 60 * 60
MAX_HUB_CANDIDATES = 5

# Synthesized pricing.
SEGMENT_BASE_PRICE = 150
PRICE_PER_HOUR = 30
PRICE_VARIANCE = 100
CONNECTION_FEE = 50
ROUND_TRIP_MULTIPLIER = 1.85

TRIP_TYPES = ("one-way", "round-trip")
BOOKING_SEARCH_URL = "https://www.google.com/search?q=flights+"

AERODATABOX_DEFAULT_HOST = "aerodatabox.p.rapidapi.com"
# The provider refuses windows longer than twelve hours.
SCHEDULE_WINDOW_MINUTES = 720
