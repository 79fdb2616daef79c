from . import crud_form, crud_response  # noqa: F401
