"""
Request payload builders for the domain REST API
"""
from typing import Any, Dict, List


def string_field(name: str) -> Dict[str, Any]:
    return {'name': name, 'type': 'string'}


def schema_definition(name: str, description: str = "Test schema") -> Dict[str, Any]:
    """Schema with a 'name' display field and a 'content' field"""
    fields: List[Dict[str, Any]] = [string_field('name'), string_field('content')]
    return {
        'name': name,
        'container': False,
        'description': description,
        'displayField': 'name',
        'fields': fields
    }


def project_definition(name: str, root_schema: str = "folder") -> Dict[str, Any]:
    return {'name': name, 'schema': {'name': root_schema}}


def node_fields() -> Dict[str, Any]:
    return {'name': "Node Name", 'content': "Node Content"}


def node_definition(parent_uuid: str, schema_name: str, fields: Dict[str, Any],
                    language: str = "en") -> Dict[str, Any]:
    return {
        'language': language,
        'parentNode': {'uuid': parent_uuid},
        'schema': {'name': schema_name},
        'fields': fields
    }


def user_definition(username: str, password: str) -> Dict[str, Any]:
    return {'username': username, 'password': password}
