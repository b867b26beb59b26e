from .coercion import CoercionAttempt, coerce, extract_json_object, run_coercion
from .errors import BuilderError
from .fallback import synthesize, synthesize_from_text
from .normalize import FIELD_LIMITS, normalize, normalize_fields
from .pipeline import GenerationOutcome, generate_resume
from .settings import BuilderSettings, create_provider, normalize_lang

__all__ = [
    "BuilderError",
    "BuilderSettings",
    "CoercionAttempt",
    "FIELD_LIMITS",
    "GenerationOutcome",
    "coerce",
    "create_provider",
    "extract_json_object",
    "generate_resume",
    "normalize",
    "normalize_fields",
    "normalize_lang",
    "run_coercion",
    "synthesize",
    "synthesize_from_text",
]
