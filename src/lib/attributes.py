"""
Document attributes

Attributes are named substitution variables ({version}, {author}). Before
the first document line is rendered the effective mapping holds, in
increasing precedence:

    built-in character attributes
    soft invocation attributes   (-a name=value@)
    invocation attributes        (-a name=value, -a name!)

Document attribute entries (:name: value) are then applied in document
order as they are reached, so an entry only counts when the line holding
it is rendered. An invocation attribute without the '@' suffix is locked:
document entries can neither change nor unset it.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

import yaml

from ..models.document import AttributeEntry


ATTRIBUTE_REF_RX = re.compile(r'(\\)?\{([A-Za-z0-9_][A-Za-z0-9_-]*)\}')

BUILTIN_ATTRIBUTES: Mapping[str, str] = MappingProxyType({
    'empty': '',
    'sp': ' ',
    'nbsp': '&#160;',
    'zwsp': '&#8203;',
    'wj': '&#8288;',
    'apos': '&#39;',
    'quot': '&#34;',
    'lsquo': '&#8216;',
    'rsquo': '&#8217;',
    'ldquo': '&#8220;',
    'rdquo': '&#8221;',
    'deg': '&#176;',
    'plus': '&#43;',
    'brvbar': '&#166;',
    'vbar': '|',
    'amp': '&',
    'lt': '<',
    'gt': '>',
    'startsb': '[',
    'endsb': ']',
    'caret': '^',
    'asterisk': '*',
    'tilde': '~',
    'backslash': '\\',
    'backtick': '`',
    'two-colons': '::',
    'two-semicolons': ';;',
    'cpp': 'C++',
})


class AttributeFileError(ValueError):
    """Raised when an attributes file is not a flat YAML mapping"""


def attributes_parseAssignments(assignments: Optional[Iterable[str]]) -> Dict[str, Optional[str]]:
    """
    Parse command line assignments into an attribute mapping.

    'name=value' sets, 'name' sets to the empty string, 'name!' unsets
    (stored as None). A trailing '@' on the value marks the assignment soft;
    the '@' is kept and stripped later by AttributeSet.

    Example:
        >>> attributes_parseAssignments(['version=3.2', 'draft!', 'toc'])
        {'version': '3.2', 'draft': None, 'toc': ''}
    """
    result: Dict[str, Optional[str]] = {}
    for assignment in assignments or []:
        if '=' in assignment:
            name, value = assignment.split('=', 1)
            result[name.strip().lower()] = value
        elif assignment.endswith('!'):
            result[assignment[:-1].strip().lower()] = None
        else:
            result[assignment.strip().lower()] = ''
    return result


def attributes_loadFile(path: Path) -> Dict[str, Optional[str]]:
    """
    Load invocation attributes from a YAML mapping.

    Scalars are converted to strings; false and null unset the attribute.

    Raises:
        AttributeFileError: If the file is not a flat mapping
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise AttributeFileError(f"Failed to parse {path}: {e}")
    except UnicodeDecodeError as e:
        raise AttributeFileError(f"{path} is not valid UTF-8: {e.reason} at byte {e.start}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise AttributeFileError(f"{path} must contain a mapping of attribute names to values")

    result: Dict[str, Optional[str]] = {}
    for name, value in data.items():
        if isinstance(value, (dict, list)):
            raise AttributeFileError(f"{path}: attribute '{name}' must be a scalar")
        if value is None or value is False:
            result[str(name).lower()] = None
        elif value is True:
            result[str(name).lower()] = ''
        else:
            result[str(name).lower()] = str(value)
    return result


def attributes_substitute(
    text: str,
    attributes: Mapping[str, str],
    missing: Optional[Callable[[str], str]] = None,
) -> str:
    """
    Replace {name} references with attribute values in a single pass.

    Substituted values are not rescanned. '\\{name}' renders as '{name}'.

    Args:
        text: Text containing references
        attributes: Effective attribute mapping (lower-case keys)
        missing: Called with the name of an unresolved reference; its
                 return value is substituted. Defaults to leaving the
                 reference verbatim.

    Example:
        >>> attributes_substitute('Quarkus {version}', {'version': '3.2'})
        'Quarkus 3.2'
    """
    def replace(match: re.Match[str]) -> str:
        if match.group(1):
            return match.group(0)[1:]
        name = match.group(2).lower()
        if name in attributes:
            return attributes[name]
        if missing is None:
            return match.group(0)
        return missing(match.group(2))

    return ATTRIBUTE_REF_RX.sub(replace, text)


@dataclass
class AttributeSet:
    """
    Precedence rules for the effective attribute mapping

    Attributes:
        invocation: Attributes given at invocation (None value = unset)
        builtins: Character attributes available to every document
    """
    invocation: Mapping[str, Optional[str]] = field(default_factory=dict)
    builtins: Mapping[str, str] = field(default_factory=lambda: BUILTIN_ATTRIBUTES)

    def locked_get(self) -> Dict[str, Optional[str]]:
        return {
            name: value for name, value in self.invocation.items()
            if value is None or not value.endswith('@')
        }

    def soft_get(self) -> Dict[str, str]:
        return {
            name: value[:-1] for name, value in self.invocation.items()
            if value is not None and value.endswith('@')
        }

    def initial_get(self) -> Dict[str, str]:
        """
        Mapping in force before the first document entry

        Returns:
            New dict of attribute name to value; unset names are absent
        """
        effective: Dict[str, str] = dict(self.builtins)
        effective.update(self.soft_get())
        for name, value in self.locked_get().items():
            if value is None:
                effective.pop(name, None)
            else:
                effective[name] = value
        return effective

    def entry_apply(self, effective: Dict[str, str], entry: AttributeEntry) -> None:
        """
        Apply one document entry to effective in place.

        Entries for locked names are ignored; the value's own references
        are substituted from the mapping as it stands.

        Example:
            >>> attributes = AttributeSet(invocation={'base': '3'})
            >>> effective = attributes.initial_get()
            >>> attributes.entry_apply(effective, AttributeEntry('full', '{base}.2', False, 1, ''))
            >>> effective['full']
            '3.2'
        """
        if entry.name in self.invocation and not (self.invocation[entry.name] or '').endswith('@'):
            return
        if entry.unset:
            effective.pop(entry.name, None)
        else:
            effective[entry.name] = attributes_substitute(entry.value, effective)
