"""Static catalogs used by onboarding steps and local live search.

Countries, popular courses and bachelor's degrees offered as suggestions.
Local live search filters these lists before any collaborator call.
"""

FEATURED_COUNTRIES: tuple[str, ...] = (
    "USA",
    "UK",
    "Canada",
    "Australia",
    "Germany",
    "Ireland",
)
"""Countries shown as one-tap options on every country step."""

ALL_COUNTRIES: tuple[str, ...] = (
    "USA",
    "UK",
    "Canada",
    "Australia",
    "Germany",
    "Ireland",
    "Singapore",
    "Netherlands",
    "New Zealand",
    "France",
    "Sweden",
    "Switzerland",
    "Japan",
    "South Korea",
    "Italy",
    "Spain",
    "Denmark",
    "Finland",
    "Norway",
    "Belgium",
    "Austria",
    "Portugal",
    "Czech Republic",
    "Poland",
    "Hungary",
    "Greece",
    "Turkey",
    "Malaysia",
    "China",
    "Hong Kong",
    "UAE",
    "Saudi Arabia",
    "Qatar",
    "Kuwait",
    "Bahrain",
    "Oman",
    "Jordan",
    "Israel",
    "South Africa",
    "Egypt",
    "Ghana",
    "Kenya",
    "Nigeria",
    "Ethiopia",
    "Tanzania",
    "Uganda",
    "Rwanda",
    "Mauritius",
    "Brazil",
    "Mexico",
    "Argentina",
    "Chile",
    "Colombia",
    "Peru",
    "Venezuela",
    "Ecuador",
    "Bolivia",
    "Uruguay",
    "Paraguay",
    "Panama",
    "Costa Rica",
    "Cuba",
    "Dominican Republic",
    "Guatemala",
    "Honduras",
    "El Salvador",
    "Nicaragua",
    "Jamaica",
    "Trinidad and Tobago",
    "Barbados",
    "Guyana",
    "Russia",
    "Ukraine",
    "Romania",
    "Slovakia",
    "Bulgaria",
    "Croatia",
    "Serbia",
    "Slovenia",
    "Bosnia",
    "North Macedonia",
    "Albania",
    "Kosovo",
    "Montenegro",
    "Lithuania",
    "Latvia",
    "Estonia",
    "Belarus",
    "Moldova",
    "Luxembourg",
    "Iceland",
    "Malta",
    "Cyprus",
    "Liechtenstein",
    "Andorra",
    "Monaco",
    "San Marino",
    "Georgia",
    "Armenia",
    "Azerbaijan",
    "Kazakhstan",
    "Uzbekistan",
    "Kyrgyzstan",
    "Tajikistan",
    "Turkmenistan",
    "Mongolia",
    "Nepal",
    "Sri Lanka",
    "Bangladesh",
    "Pakistan",
    "Afghanistan",
    "Myanmar",
    "Thailand",
    "Vietnam",
    "Indonesia",
    "Philippines",
    "Cambodia",
    "Laos",
    "Taiwan",
    "Brunei",
    "Timor-Leste",
    "Maldives",
    "Bhutan",
    "Iraq",
    "Iran",
    "Syria",
    "Lebanon",
    "Yemen",
    "Palestine",
    "Libya",
    "Tunisia",
    "Algeria",
    "Morocco",
    "Sudan",
    "South Sudan",
    "Somalia",
    "Eritrea",
    "Djibouti",
    "Samoa",
    "Senegal",
    "Ivory Coast",
    "Cameroon",
    "Mozambique",
    "Madagascar",
    "Zimbabwe",
    "Zambia",
    "Malawi",
    "Botswana",
    "Namibia",
    "Angola",
    "Congo",
    "DR Congo",
    "Gabon",
    "Equatorial Guinea",
    "Central African Republic",
    "Chad",
    "Niger",
    "Mali",
    "Mauritania",
    "Burkina Faso",
    "Benin",
    "Togo",
    "Guinea",
    "Guinea-Bissau",
    "Sierra Leone",
    "Liberia",
    "Gambia",
    "Cape Verde",
    "Sao Tome and Principe",
    "Comoros",
    "Papua New Guinea",
    "Fiji",
    "Solomon Islands",
    "Vanuatu",
    "Micronesia",
    "Palau",
    "Marshall Islands",
    "Nauru",
    "Tonga",
    "Kiribati",
    "Tuvalu",
)
"""Full country list for country search (top study destinations first)."""

POPULAR_COURSES: tuple[str, ...] = (
    "Computer Science",
    "Data Science",
    "Business Administration (MBA)",
    "Mechanical Engineering",
    "Electrical Engineering",
    "Civil Engineering",
    "Artificial Intelligence",
    "Information Technology",
    "Finance",
    "Marketing",
    "Public Health",
    "Nursing",
)

BACHELORS_DEGREES: tuple[str, ...] = (
    "B.Tech in Computer Science",
    "B.Tech in Mechanical Engineering",
    "B.Tech in Electrical Engineering",
    "B.Tech in Civil Engineering",
    "B.Tech in Information Technology",
    "B.Sc in Physics",
    "B.Sc in Mathematics",
    "B.Sc in Chemistry",
    "B.Sc in Computer Science",
    "B.A. in Economics",
    "B.A. in English",
    "B.A. in History",
    "B.Com",
    "BBA",
    "BCA",
    "MBBS",
    "B.Arch",
    "B.Des",
    "B.Ed",
    "B.Pharm",
)

CATALOGS: dict[str, tuple[str, ...]] = {
    "countries": ALL_COUNTRIES,
    "courses": POPULAR_COURSES,
    "bachelors": BACHELORS_DEGREES,
}
"""Local suggestion sources keyed by the name steps reference."""


def filter_catalog(entries: tuple[str, ...] | list[str], query: str, limit: int) -> list[str]:
    """Case-insensitive substring filter, preserving catalog order.

    Args:
        entries: Catalog to filter.
        query: Text typed by the user.
        limit: Maximum number of results.

    Returns:
        Up to ``limit`` matching entries.
    """
    needle = query.strip().casefold()
    if not needle:
        return []
    return [e for e in entries if needle in e.casefold()][:limit]
