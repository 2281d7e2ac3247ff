import hashlib

# 16 bytes de SHA-256 en hex: suficiente para no colisionar dentro de un feed
STABLE_ID_LENGTH = 32


def stable_id(title: str, *components: str) -> str:
    """
    Identificador determinístico derivado de (title, components...).
    No depende de estado del proceso (ni hash() salteado, ni uuid), así dos
    parseos del mismo contenido dan el mismo id y el front no re-renderiza.
    """
    raw = "|".join((title, *components))
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:STABLE_ID_LENGTH]
