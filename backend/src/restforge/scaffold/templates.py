"""Source templates for generated action files.

Placeholders:
    ${class_name}   Resource class prefix (e.g. OrderItem)
    ${kind}         Action kind (e.g. Search)
    ${table}        Table or view name (e.g. order_item)
    ${description}  One-line docstring for the generated class
"""

ACTION_TEMPLATE = '''\
"""${kind} action for the ${class_name} resource.

Generated by `restforge forge`. Edit freely; regenerate with --force.
"""

from restforge.actions import ${kind}Action


class ${class_name}${kind}Action(${kind}Action):
    """${description}"""

    table = "${table}"
'''

DESCRIPTIONS = {
    "Search": "List ${class_name} records, filtered by query parameters.",
    "Read": "Fetch one ${class_name} record by id.",
    "Create": "Create a ${class_name} record from the JSON body.",
    "Update": "Update a ${class_name} record from the JSON body.",
    "Delete": "Delete a ${class_name} record by id.",
}


def render(template: str, values: dict[str, str]) -> str:
    """Substitute ${name} placeholders.

    Raises:
        KeyError: If the template still contains a placeholder afterwards.
    """
    content = template
    for name, value in values.items():
        content = content.replace("${" + name + "}", value)

    start = content.find("${")
    if start != -1:
        end = content.find("}", start)
        raise KeyError(f"Unbound template placeholder: {content[start:end + 1]}")
    return content


def render_action(kind: str, class_name: str, table: str) -> str:
    """Render the source of ``<class_name><kind>Action``.

    Raises:
        KeyError: For kinds without a template.
    """
    if kind not in DESCRIPTIONS:
        raise KeyError(f"No template for action kind '{kind}'")

    values = {"class_name": class_name, "kind": kind, "table": table}
    values["description"] = render(DESCRIPTIONS[kind], values)
    return render(ACTION_TEMPLATE, values)
