"""
Utils package - JSON helpers for prompts and LLM responses
"""

from .helpers import CustomJSONEncoder, to_json, strip_code_fences, extract_json_payload

__all__ = ['CustomJSONEncoder', 'to_json', 'strip_code_fences', 'extract_json_payload']
