"""Instructions, reference knowledge and response schema sent with every analysis."""

from google.genai import types
from pydantic.alias_generators import to_camel

from chemanalyzer.models.analysis import AnalysisResult, ImageQuery, TextQuery

REFERENCE_DATA = """
СПРАВОЧНАЯ ИНФОРМАЦИЯ ИЗ ТЕХНИЧЕСКОГО ОТЧЕТА:

1. Соответствие продуктов и марок органобентонитов:
- Эмаль ПФ-115: Низкая полярность. Рекомендуемые: 801-D, Bentone 34, Claytone 40.
- Грунтовка ГФ-021: Низкая/Средняя полярность. Рекомендуемые: 801-C, BP-181, Bentone 38.
- Эмаль ЭП-140: Высокая полярность. Рекомендуемые: Bentone 27, Claytone APA, Tixogel VZ.
- Эмаль АК-511: Средняя полярность. Рекомендуемые: BP-181, Bentone SD-1.
- Смазки (Литол-24): Очень низкая полярность. Рекомендуемые: Bentone 34, 801-D.
- Эмаль УР-1527: Высокая полярность. Рекомендуемые: Bentone SD-2, Bentone 27.
- Гелькоуты: Средняя полярность. Рекомендуемые: Garamite 1958, Bentone 38.
- Лак НЦ-218: Высокая полярность. Рекомендуемые: Bentone 27, Tixogel VZ, 801-D2.
- Клей 88-Н/88-СА: Средняя полярность. Рекомендуемые: Bentone 38, BP-183, Claytone HY.

2. Характеристики марок органобентонитов:
- Bentone 34 (Elementis, США): Низкая полярность, $4.5-$6.0/кг. Универсальный, нужен активатор.
- Bentone 38 (Elementis, США): Средняя полярность, $5.0-$7.0/кг. На основе гекторита, прозрачный.
- Bentone 27 (Elementis, США): Высокая полярность, $6.5-$8.5/кг. Для ЭП и ПУ систем.
- Bentone SD-1 (Elementis, США): Низкая/Средняя полярность, $8.0-$11.0/кг. Самоактивирующийся (без прегеля).
- Claytone 40 (BYK, Германия): Низкая полярность, $4.0-$5.5/кг. Чистый монтмориллонит Вайоминга.
- 801-D / HT-1 (Китай): Низкая полярность, $1.5-$2.5/кг. Бюджетный, высокая абразивность.
- Garamite 1958 (BYK, Германия): Смешанная полярность, $12.0-$18.0/кг. Гибридная глина, сверхэффективная.

3. Химическая природа ПАВ (ЧАС):
- Низкая полярность: Диметилдистеариламмоний хлорид (Arquad 2HT-75, Noramium M2HT). Длинные цепи C18.
- Средняя полярность: Диметилбензилалкиламмоний (Arquad M2B, Variquat B). Бензильный радикал.
- Высокая полярность: Метилбензилдиалкиламмоний (Ethoquad, Tomamine). -OH группы, циклы.

4. Минеральные основы:
- Бентонит (Монтмориллонит): Диоктаэдрический (Al). Сероватый, дешевый. Вайоминг, Индия.
- Гекторит: Триоктаэдрический (Mg-Li). Белоснежный, прозрачный гель. Калифорния.

5. Технологические рекомендации:
- Низкополярные среды: Обязателен полярный активатор (метанол/вода) или прегель (10% паста).
- Высокополярные среды: Риск переактивации.
- Марки SD: Не требуют активации.
"""

SYSTEM_INSTRUCTION = f"""Ты — эксперт-химик в области ЛКМ и реологических добавок.
Твоя задача — анализировать названия продуктов и изображения этикеток, особенно на русском языке.
Используй предоставленные справочные данные для формирования точных отчетов.
Если продукт введен на русском языке (например, "ПФ-115", "ГФ-021", "Литол"), сопоставь его с соответствующими техническими характеристиками из справочника.
Если продукт есть в справочнике, приоритетно используй данные оттуда (марки, цены, ПАВ).
Даже если название введено с опечатками или в разговорной форме, постарайся идентифицировать его химическую природу.

ВАЖНО: Весь текст в JSON-ответе должен быть на русском языке.
{REFERENCE_DATA}"""

IMAGE_PROMPT = (
    "Проанализируй этикетку на этом изображении. Определи продукт (ЛКМ, смазка или клей) "
    "и предоставь детальную информацию о его химической природе и подходящих "
    "органобентонитах, основываясь на справочных данных."
)

TEXT_PROMPT_TEMPLATE = (
    'Проанализируй продукт по названию: "{query}". Определи его химическую природу '
    "и предоставь детальную информацию о подходящих органобентонитах, "
    "основываясь на справочных данных."
)

# Keyed by AnalysisResult field name
FIELD_DESCRIPTIONS: dict[str, str] = {
    "manufacturer": "Компания производитель продукта",
    "country": "Страна производитель продукта",
    "chemical_nature": "Химическая природа ЛКМ (алкидная, масляная и пр.)",
    "purpose": "Хозяйственное назначение",
    "medium_polarity": "Полярность дисперсионной среды",
    "medium_chemical_nature": "Химическая природа дисперсионной среды",
    "organobentonite_brands": "Наиболее вероятные марки (бренды) органобентонита",
    "bentonite_base_type": "Вероятный тип бентонитовой основы",
    "bentonite_properties": "Физико-химические свойства этой основы",
    "surfactant_nature": "Вероятная химическая природа катионного ПАВ",
    "application_notes": "Особенности применения данного органобентонита",
    "organobentonite_manufacturers": "Компании и страны производители органобентонита",
}


def _build_schema() -> types.Schema:
    properties = {
        to_camel(name): types.Schema(type=types.Type.STRING, description=FIELD_DESCRIPTIONS[name])
        for name in AnalysisResult.model_fields
    }
    return types.Schema(
        type=types.Type.OBJECT,
        properties=properties,
        required=list(properties),
    )


ANALYSIS_SCHEMA = _build_schema()


def build_prompt(query: TextQuery | ImageQuery) -> str:
    if isinstance(query, ImageQuery):
        return IMAGE_PROMPT
    return TEXT_PROMPT_TEMPLATE.format(query=query.text)
