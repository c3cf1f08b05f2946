"""
Render a finalized template as a CloudFormation document.
"""
import json

import pulumi

from .errors import EmissionError
from .graph import FINALIZED
from .refs import Ref, Join, Pseudo, resolve

__all__ = 'to_cloudformation', 'to_json', 'intrinsic',

FORMAT_VERSION = '2010-09-09'


def intrinsic(value):
    """
    The CloudFormation intrinsic function for a deferred value
    """
    if isinstance(value, Ref):
        if value.attribute is None:
            return {'Ref': value.target}
        return {'Fn::GetAtt': [value.target, value.attribute]}
    elif isinstance(value, Pseudo):
        return {'Ref': value.name}
    elif isinstance(value, Join):
        return {'Fn::Join': [value.delimiter, [resolve(p, intrinsic) for p in value.parts]]}
    else:
        raise EmissionError(f"Don't know how to render {value!r}")


def to_cloudformation(template):
    """
    Build the document. Externally defined resources are referenced but not
    declared.
    """
    if template.state != FINALIZED:
        raise EmissionError(f"Only finalized templates can be rendered (this one is {template.state})")

    explicit = {}
    for from_, to in template.explicit_edges:
        explicit.setdefault(from_, []).append(to)

    resources = {}
    for lid, resource in template.ordered_resources():
        if resource.external:
            continue
        entry = {
            'Type': resource.kind,
            'Properties': resolve(resource.properties(), intrinsic),
        }
        if lid in explicit:
            entry['DependsOn'] = explicit[lid]
        if template.retained(lid):
            entry['DeletionPolicy'] = 'Retain'
        resources[lid] = entry

    doc = {'AWSTemplateFormatVersion': FORMAT_VERSION}
    if template.description:
        doc['Description'] = template.description
    doc['Resources'] = resources
    pulumi.debug(f"Rendered {len(resources)} resources")
    return doc


def to_json(template, **kwargs):
    kwargs.setdefault('indent', 2)
    return json.dumps(to_cloudformation(template), **kwargs)
