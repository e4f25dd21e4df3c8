"""
Utilidades gerais da aplicação
"""

import json
import re
from datetime import datetime, date
from decimal import Decimal
from typing import Any


_FENCED_BLOCK = re.compile(r"^```[\w-]*\s*(.*?)\s*```$", re.DOTALL)

_CLOSERS = {"[": "]", "{": "}"}


class CustomJSONEncoder(json.JSONEncoder):
    """Encoder JSON personalizado"""

    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return super().default(obj)


def to_json(data: Any, indent: int = 2) -> str:
    """Serializar dados (Decimal, datas) para embutir em prompts"""
    return json.dumps(data, cls=CustomJSONEncoder, indent=indent, ensure_ascii=False)


def strip_code_fences(text: str) -> str:
    """Remover bloco markdown (```json ... ``` ou ``` ... ```) que envolve a resposta inteira"""
    if not text:
        return ""

    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned

    match = _FENCED_BLOCK.match(cleaned)
    if match:
        return match.group(1).strip()

    return cleaned


def extract_json_payload(text: str) -> Any:
    """
    Extrair e decodificar o JSON de uma resposta de LLM.

    Tenta o texto como veio, depois sem o bloco markdown; se ainda falhar,
    recorta do primeiro '[' ou '{' até o último fechamento correspondente.
    Levanta ValueError se nada for decodificável.
    """
    raw = (text or "").strip()
    if not raw:
        raise ValueError("Resposta vazia")

    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass

    cleaned = strip_code_fences(raw)
    if not cleaned:
        raise ValueError("Resposta vazia")

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    starts = [i for i in (cleaned.find("["), cleaned.find("{")) if i != -1]
    if not starts:
        raise ValueError("Nenhum JSON encontrado na resposta")

    start = min(starts)
    end = cleaned.rfind(_CLOSERS[cleaned[start]])
    if end <= start:
        raise ValueError("JSON incompleto na resposta")

    try:
        return json.loads(cleaned[start:end + 1])
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON inválido na resposta: {e}") from e
