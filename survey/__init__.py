"""Form state and validation core for the AI usage survey."""

from .form_state import FormState  # noqa: F401
from .schema import (  # noqa: F401
    DynamicSubSchema,
    FieldSchema,
    Rule,
    SchemaError,
    SurveySchema,
)
from .submission import (  # noqa: F401
    FormSession,
    FormSessionClosed,
    build_answers,
    submit,
)
from .validation import validate  # noqa: F401
