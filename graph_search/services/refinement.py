"""
Services - Refinement Builder

Translates selected facet values into FQL-style aggregation filter strings.
"""

from typing import List

from graph_search.schemas.context import DataFilter


FQL_FUNCTION_PREFIXES = ("range(", "and(", "or(", "not(", "any(", "all(")


def format_refinement_value(value: str) -> str:
    """
    Quote a refinement value unless it is already an FQL expression.

    Tokens handed back by the service (`"ǂǂ..."`) and range expressions
    (`range(2024-01-01T00:00:00Z, max)`) pass through untouched.
    """
    stripped = value.strip()
    if stripped.lower().startswith(FQL_FUNCTION_PREFIXES):
        return stripped
    if len(stripped) >= 2 and stripped.startswith('"') and stripped.endswith('"'):
        return stripped
    return f'"{stripped}"'


def build_refinement_strings(selected_filters: List[DataFilter]) -> List[str]:
    """
    Build one refinement expression per facet dimension that has values.

    Args:
        selected_filters: Current facet selections

    Returns:
        Expressions such as `FileType:"docx"` or
        `FileType:or("docx","pptx")`, in selection order
    """
    expressions = []

    for selected in selected_filters:
        values = [v.value for v in selected.values if v.value]
        if not values:
            continue

        formatted = [format_refinement_value(v) for v in values]
        if len(formatted) > 1:
            joined = ",".join(formatted)
            expressions.append(f"{selected.filter_name}:{selected.operator.value}({joined})")
        else:
            expressions.append(f"{selected.filter_name}:{formatted[0]}")

    return expressions
