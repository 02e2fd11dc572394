"""ISO 3166-1 alpha-2 reference data and per-country time-zone hints."""

COUNTRY_CODES: frozenset[str] = frozenset(
    """
    AD AE AF AG AI AL AM AO AQ AR AS AT AU AW AX AZ
    BA BB BD BE BF BG BH BI BJ BL BM BN BO BQ BR BS BT BV BW BY BZ
    CA CC CD CF CG CH CI CK CL CM CN CO CR CU CV CW CX CY CZ
    DE DJ DK DM DO DZ
    EC EE EG EH ER ES ET
    FI FJ FK FM FO FR
    GA GB GD GE GF GG GH GI GL GM GN GP GQ GR GS GT GU GW GY
    HK HM HN HR HT HU
    ID IE IL IM IN IO IQ IR IS IT
    JE JM JO JP
    KE KG KH KI KM KN KP KR KW KY KZ
    LA LB LC LI LK LR LS LT LU LV LY
    MA MC MD ME MF MG MH MK ML MM MN MO MP MQ MR MS MT MU MV MW MX MY MZ
    NA NC NE NF NG NI NL NO NP NR NU NZ
    OM
    PA PE PF PG PH PK PL PM PN PR PS PT PW PY
    QA
    RE RO RS RU RW
    SA SB SC SD SE SG SH SI SJ SK SL SM SN SO SR SS ST SV SX SY SZ
    TC TD TF TG TH TJ TK TL TM TN TO TR TT TV TW TZ
    UA UG UM US UY UZ
    VA VC VE VG VI VN VU
    WF WS
    YE YT
    ZA ZM ZW
    """.split()
)

# Common zones per country for pickers (not exhaustive).
_COUNTRY_TIMEZONES: dict[str, list[tuple[str, str]]] = {
    "US": [
        ("America/New_York", "Eastern Time"),
        ("America/Chicago", "Central Time"),
        ("America/Denver", "Mountain Time"),
        ("America/Los_Angeles", "Pacific Time"),
        ("America/Anchorage", "Alaska Time"),
        ("Pacific/Honolulu", "Hawaii Time"),
    ],
    "GB": [("Europe/London", "Greenwich Mean Time")],
    "FR": [("Europe/Paris", "Central European Time")],
    "DE": [("Europe/Berlin", "Central European Time")],
    "ES": [
        ("Europe/Madrid", "Central European Time"),
        ("Atlantic/Canary", "Canary Islands"),
    ],
    "JP": [("Asia/Tokyo", "Japan Standard Time")],
    "CN": [("Asia/Shanghai", "China Standard Time")],
    "AU": [
        ("Australia/Sydney", "Australian Eastern Time"),
        ("Australia/Melbourne", "Australian Eastern Time"),
        ("Australia/Adelaide", "Australian Central Time"),
        ("Australia/Perth", "Australian Western Time"),
    ],
    "IN": [("Asia/Kolkata", "India Standard Time")],
    "NP": [("Asia/Kathmandu", "Nepal Time")],
    "AE": [("Asia/Dubai", "Gulf Standard Time")],
    "IL": [("Asia/Jerusalem", "Israel Standard Time")],
}


def normalize_country_code(code: str) -> str:
    return code.strip().upper()


def is_valid_country_code(code: object) -> bool:
    """Return True if *code* is an ISO 3166-1 alpha-2 code (case-insensitive)."""
    if not isinstance(code, str):
        return False
    return normalize_country_code(code) in COUNTRY_CODES


def timezones_for_country(code: str) -> list[tuple[str, str]]:
    """Return ``(iana_zone, display_name)`` pairs known for *code*, or ``[]``."""
    return list(_COUNTRY_TIMEZONES.get(normalize_country_code(code), []))
