"""
Navegación segura sobre el JSON crudo de InnerTube.

Es el único lugar donde se tolera el tipado dinámico: cada accesor devuelve
None (o un valor vacío) cuando la forma no es la esperada, nunca lanza.
"""
from typing import Any


def dig(node: Any, *path: str | int) -> Any:
    """
    Recorre `path` sobre dicts (claves str) y listas (índices int).
    dig(r, "title", "runs", 0, "text") -> "Canción" | None
    """
    current = node
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list):
                return None
            if key >= len(current) or key < -len(current):
                return None
            current = current[key]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(key)
        if current is None:
            return None
    return current


def as_dict(value: Any) -> dict | None:
    return value if isinstance(value, dict) else None


def as_list(value: Any) -> list:
    """Siempre devuelve lista (vacía si no es una)."""
    return value if isinstance(value, list) else []


def as_dicts(value: Any) -> list[dict]:
    # filtramos basura dentro de arrays (null, strings sueltos, etc.)
    return [v for v in as_list(value) if isinstance(v, dict)]


def as_str(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def as_int(value: Any) -> int | None:
    """Acepta ints, floats enteros y strings numéricos ("1,024")."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        cleaned = value.replace(",", "").strip()
        if cleaned.isdigit():
            return int(cleaned)
    return None


def renderer_keys(node: Any) -> list[str]:
    """Claves que terminan en 'Renderer' (para loguear formas desconocidas)."""
    if not isinstance(node, dict):
        return []
    return sorted(k for k in node if k.endswith("Renderer"))
