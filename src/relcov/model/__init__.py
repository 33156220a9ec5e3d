"""
relcov.model - Authorization model structures and loaders
"""

from relcov.model.dsl import parse_dsl
from relcov.model.loader import load_model, parse_json_model, parse_model_text
from relcov.model.schema import AuthorizationModel, ModelParseError, TypeDefinition

__all__ = [
    "AuthorizationModel",
    "ModelParseError",
    "TypeDefinition",
    "load_model",
    "parse_dsl",
    "parse_json_model",
    "parse_model_text",
]
