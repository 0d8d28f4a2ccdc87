# impactnow/forms/payload.py

from werkzeug.datastructures import MultiDict


def payload_to_formdata(payload, field_map):
    """
    Convert a JSON object into form data WTForms can process.

    ``field_map`` maps JSON keys to form field names. Lists and nested
    objects are left out because none of the mapped fields accept them.
    """
    formdata = MultiDict()
    if not isinstance(payload, dict):
        return formdata

    for json_key, field_name in field_map.items():
        value = payload.get(json_key)
        if value is None or isinstance(value, (list, dict)):
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, float) and value.is_integer():
            value = int(value)
        formdata.add(field_name, str(value))
    return formdata
