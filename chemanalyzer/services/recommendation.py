"""KZPM organobentonite recommendation derived from the medium polarity."""

ORGANOBENT_ADDITIVE = "Соответствующая марка органобентонита КЗПМ: Органобент - реологическая добавка"
ORGANOBENT_PAINT = "Соответствующая марка органобентонита КЗПМ: Органобент - ЛКМ"

# First match wins, so "низкая/средняя" resolves to the low-polarity grade
_POLARITY_TABLE: list[tuple[tuple[str, ...], str]] = [
    (("очень низкая", "низкая"), ORGANOBENT_ADDITIVE),
    (("чуть более полярная", "средняя"), ORGANOBENT_PAINT),
]


def kzpm_recommendation(medium_polarity: str) -> str | None:
    polarity = medium_polarity.lower()
    for markers, recommendation in _POLARITY_TABLE:
        if any(marker in polarity for marker in markers):
            return recommendation
    return None
