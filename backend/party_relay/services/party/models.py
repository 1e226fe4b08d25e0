import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def is_falsy(value: Any) -> bool:
    """Falsy the way client payloads treat it.

    Only None, False, zero, NaN and the empty string count. Empty lists and
    objects are real values and are relayed as sent.
    """
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or value != value
    if isinstance(value, str):
        return value == ''
    return False


def as_text(value: Any) -> str:
    """Render a payload value as client-side text (true/false, 5 not 5.0)."""
    if isinstance(value, str):
        return value
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return ','.join(as_text(v) for v in value)
    return '[object Object]'


def _parse_number(text: str):
    lowered = text.lower()
    if lowered[:2] in ('0x', '0o', '0b'):
        return int(text, 0)
    if '_' in text:
        raise ValueError(text)
    return float(text)


def coerce_number(value: Any, default):
    """Loose numeric coercion used for client transforms.

    Numbers pass through, booleans count as 1/0 and numeric strings are
    parsed, including unsigned 0x/0o/0b literals ("0x10" is 16). Anything
    else, and any zero, NaN or infinite result, falls back to `default`.
    A zero therefore never survives when the default is not zero (chap=0
    becomes 1), while negatives do.
    """
    if isinstance(value, bool):
        number = int(value)
    elif isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        try:
            number = _parse_number(text)
        except ValueError:
            return default
        if isinstance(number, float) and math.isfinite(number) and number.is_integer():
            number = int(number)
    else:
        return default

    if isinstance(number, float) and not math.isfinite(number):
        return default
    if not number:
        return default
    return number


@dataclass
class State:
    x: Any = 0
    y: Any = 0
    z: Any = 0
    yaw: Any = 0
    pitch: Any = 0
    chap: Any = 1
    anim: Any = 'idle'

    @classmethod
    def from_fields(cls, fields: Optional[Dict[str, Any]]) -> 'State':
        fields = fields or {}
        return cls(
            x=coerce_number(fields.get('x'), 0),
            y=coerce_number(fields.get('y'), 0),
            z=coerce_number(fields.get('z'), 0),
            yaw=coerce_number(fields.get('yaw'), 0),
            pitch=coerce_number(fields.get('pitch'), 0),
            chap=coerce_number(fields.get('chap'), 1),
            anim='idle' if is_falsy(fields.get('anim')) else fields['anim'],
        )

    def to_dict(self):
        return {
            'x': self.x,
            'y': self.y,
            'z': self.z,
            'yaw': self.yaw,
            'pitch': self.pitch,
            'chap': self.chap,
            'anim': self.anim,
        }


@dataclass
class Member:
    id: str
    name: str
    color: str
    handle: Any
    party_code: str
    last_state: Optional[State] = None

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'color': self.color,
            'state': self.last_state.to_dict() if self.last_state else None,
        }


@dataclass
class Party:
    code: str
    members: Dict[str, Member] = field(default_factory=dict)

    def __len__(self):
        return len(self.members)

    def handles(self) -> List[Any]:
        return [m.handle for m in self.members.values()]

    def snapshot(self) -> List[Dict[str, Any]]:
        return [m.to_dict() for m in self.members.values()]
