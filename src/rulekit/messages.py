"""Default English message templates, keyed by validator name."""

DEFAULT_TEMPLATE = "'{PropertyName}' is not valid."

TEMPLATES: dict[str, str] = {
    "NotNullValidator": "'{PropertyName}' must not be empty.",
    "NotEmptyValidator": "'{PropertyName}' must not be empty.",
    "LengthValidator": "'{PropertyName}' must be between {MinLength} and {MaxLength} characters. "
                       "You entered {TotalLength} characters.",
    "MinimumLengthValidator": "The length of '{PropertyName}' must be at least {MinLength} characters. "
                              "You entered {TotalLength} characters.",
    "MaximumLengthValidator": "The length of '{PropertyName}' must be {MaxLength} characters or fewer. "
                              "You entered {TotalLength} characters.",
    "ExactLengthValidator": "'{PropertyName}' must be {MaxLength} characters in length. "
                            "You entered {TotalLength} characters.",
    "InclusiveBetweenValidator": "'{PropertyName}' must be between {From} and {To}. You entered {Value}.",
    "ExclusiveBetweenValidator": "'{PropertyName}' must be between {From} and {To} (exclusive). "
                                 "You entered {Value}.",
    "StringEnumValidator": "'{PropertyName}' has a range of values which does not include '{PropertyValue}'.",
    "PredicateValidator": "The specified condition was not met for '{PropertyName}'.",
    "AsyncPredicateValidator": "The specified condition was not met for '{PropertyName}'.",
}


def get_template(validator_name: str) -> str:
    return TEMPLATES.get(validator_name, DEFAULT_TEMPLATE)
