from myclinics.exceptions import APIException, create_error_response, group_validation_errors
from myclinics import messages


def test_api_exception_defaults_to_code_then_status_message():
    assert APIException(409, code=messages.SLOT_UNAVAILABLE).detail == messages.CODE_MESSAGES[messages.SLOT_UNAVAILABLE]
    assert APIException(404).detail == messages.STATUS_MESSAGES[404]
    assert APIException(400, "custom").detail == "custom"


def test_error_envelope_shape():
    assert create_error_response("m", "CODE", {"f": ["bad"]}) == {
        "success": False,
        "message": "m",
        "code": "CODE",
        "errors": {"f": ["bad"]},
    }


def test_group_validation_errors_by_field():
    grouped = group_validation_errors([
        {"type": "value_error", "loc": ("body", "email"), "msg": "Value error, البريد الإلكتروني غير صالح"},
        {"type": "missing", "loc": ("body", "password"), "msg": "Field required"},
        {"type": "int_parsing", "loc": ("query", "page"), "msg": "Input should be a valid integer"},
        {"type": "json_invalid", "loc": ("body",), "msg": "Invalid JSON"},
    ])
    assert grouped == {
        "email": ["البريد الإلكتروني غير صالح"],
        "password": [messages.VALIDATION_MESSAGES["missing"]],
        "page": [messages.VALIDATION_MESSAGES["int_parsing"]],
        "__root__": [messages.VALIDATION_MESSAGES["json_invalid"]],
    }


def test_validation_messages_fill_in_constraints():
    grouped = group_validation_errors([
        {"type": "string_too_short", "loc": ("body", "name"), "msg": "String should have at least 2 characters",
         "ctx": {"min_length": 2}},
        {"type": "greater_than_equal", "loc": ("body", "fee"), "msg": "Input should be greater than or equal to 0",
         "ctx": {"ge": 0}},
    ])
    assert grouped["name"] == ["يجب ألا يقل طول النص عن 2 أحرف."]
    assert grouped["fee"] == ["يجب أن تكون القيمة أكبر من أو تساوي 0."]


def test_unknown_validation_types_fall_back_to_generic_arabic():
    grouped = group_validation_errors([{"type": "url_parsing", "loc": ("body", "site"), "msg": "Input should be a valid URL"}])
    assert grouped == {"site": [messages.status_message(422)]}
