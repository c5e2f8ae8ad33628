import re
import typing
from typing import get_type_hints, get_args, get_origin
from datetime import datetime, timedelta, timezone
import dataclasses as dc

DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"
DURATION_RE = re.compile(
    r"^(?P<sign>-)?P(?:(?P<days>\d+(?:\.\d+)?)D)?"
    r"(?:T(?:(?P<hours>\d+(?:\.\d+)?)H)?(?:(?P<minutes>\d+(?:\.\d+)?)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$"
)


def to_datetime(string):
    string = string.replace("Z", "+00:00")
    # fromisoformat only accepts 3 or 6 fractional digits before python 3.11
    match = re.match(r"^(.*T\d\d:\d\d:\d\d)\.(\d+)(.*)$", string)
    if match:
        head, frac, tail = match.groups()
        string = f"{head}.{frac[:6].ljust(6, '0')}{tail}"
    return datetime.fromisoformat(string)


def from_datetime(dt):
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    offset = dt.strftime("%z")
    if offset in ("+0000", ""):
        suffix = "Z"
    else:
        suffix = f"{offset[:3]}:{offset[3:]}"
    return dt.strftime(DATETIME_FORMAT) + suffix


def to_timedelta(string):
    match = DURATION_RE.match(string)
    if match is None or string in ("P", "-P") or string.endswith("T"):
        raise ValueError(f"Invalid ISO-8601 duration '{string}'")
    parts = {k: float(v) for k, v in match.groupdict().items() if k != "sign" and v is not None}
    td = timedelta(**parts)
    return -td if match.group("sign") else td


def _fmt_number(value):
    return f"{value:f}".rstrip("0").rstrip(".")


def from_timedelta(td):
    sign = "-" if td < timedelta(0) else ""
    td = abs(td)
    days = td.days
    hours, rem = divmod(td.seconds, 3600)
    minutes, seconds = divmod(rem, 60)
    seconds = seconds + td.microseconds / 1_000_000
    res = f"{sign}P"
    if days:
        res += f"{days}D"
    time_part = ""
    if hours:
        time_part += f"{hours}H"
    if minutes:
        time_part += f"{minutes}M"
    if seconds or not (days or hours or minutes):
        time_part += f"{_fmt_number(seconds)}S"
    if time_part:
        res += "T" + time_part
    return res


def camel_case(name: str) -> str:
    """Wire name of a python attribute: `resource_version` -> `resourceVersion`, `continue_` -> `continue`"""
    name = name.rstrip("_")
    head, *tail = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in tail)


class ConverterFunc(typing.NamedTuple):
    from_json_type: typing.Callable
    to_json_type: typing.Callable


TYPE_CONVERTERS = {
    datetime: ConverterFunc(from_json_type=to_datetime, to_json_type=from_datetime),
    timedelta: ConverterFunc(from_json_type=to_timedelta, to_json_type=from_timedelta),
}

EMPTY_DICT = {}


class Converter(typing.NamedTuple):
    is_list: bool
    supp_kw: bool
    func: typing.Callable

    def __call__(self, value, kw):
        if not self.supp_kw:
            kw = EMPTY_DICT
        if self.is_list:
            f = self.func
            return [f(_, **kw) for _ in value]
        return self.func(value, **kw)


def nohop(x, kw):
    return x


def is_dataclass_json(cls):
    return dc.is_dataclass(cls) and isinstance(cls, type) and issubclass(cls, DataclassDictMixIn)


def unwrap_optional(t):
    if get_origin(t) is typing.Union:
        args = [a for a in get_args(t) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return t


def extract_types(cls, is_to=True):
    func_name = "to_json_type" if is_to else "from_json_type"
    method_name = "to_dict" if is_to else "from_dict"
    types = get_type_hints(cls)
    for field in dc.fields(cls):
        k = field.name
        t = unwrap_optional(types[k])

        if get_origin(t) is list:
            is_list = True
            t = unwrap_optional(get_args(t)[0])
        else:
            is_list = False

        if is_dataclass_json(t):
            yield k, Converter(is_list=is_list, supp_kw=True, func=getattr(t, method_name))
        elif t in TYPE_CONVERTERS:
            yield k, Converter(is_list=is_list, supp_kw=False, func=getattr(TYPE_CONVERTERS[t], func_name))
        else:
            if is_to:
                yield k, nohop


class LazyAttribute:
    def __init__(self, key, convert):
        self.key = key
        self.convert = convert

    def __get__(self, instance, owner):
        if instance is None:
            return self
        value = instance._lazy_values[self.key]
        if value is not None:
            value = self.convert(value, instance._lazy_kwargs)
        setattr(instance, self.key, value)
        del instance._lazy_values[self.key]
        return value


class DataclassDictMixIn:
    """Conversion of dataclasses from/to the JSON representation used on the wire.

    Attribute names are converted to camelCase unless a different name is set with the field
    metadata `json`. Attributes set to `None` are not encoded.
    """
    _late_init_from: typing.List = None
    _late_init_to: typing.List = None
    _json_to_prop: typing.Dict = None
    _prop_to_json: typing.Dict = None
    _valid_params: typing.Set = None

    @classmethod
    def _setup(cls):
        if '_late_init_from' not in cls.__dict__:
            cls._late_init_from = list(extract_types(cls, is_to=False))
            for k, convert in cls._late_init_from:
                setattr(cls, k, LazyAttribute(k, convert))
            cls._prop_to_json = {field.name: field.metadata.get('json', camel_case(field.name))
                                 for field in dc.fields(cls)}
            cls._json_to_prop = {v: k for k, v in cls._prop_to_json.items()}
            cls._late_init_to = list(extract_types(cls, is_to=True))
            cls._valid_params = {f.name for f in dc.fields(cls) if f.init}

    @classmethod
    def from_dict(cls, d, lazy=True):
        cls._setup()
        kwargs = dict(lazy=lazy)
        params = cls._valid_params
        valid_d = {}
        transform = cls._json_to_prop.get
        for k, v in d.items():
            k = transform(k, k)
            if k in params:
                valid_d[k] = v
        obj = cls(**valid_d)
        if lazy:
            obj._lazy_values = {}
            obj._lazy_kwargs = kwargs
            for k, _ in cls._late_init_from:
                obj._lazy_values[k] = obj.__dict__.pop(k, None)
        else:
            d = obj.__dict__
            for k, convert in cls._late_init_from:
                if d.get(k) is not None:
                    d[k] = convert(d[k], kwargs)
        return obj

    def to_dict(self, dict_factory=dict):
        self._setup()
        kwargs = dict(dict_factory=dict_factory)
        result = []
        lazy_attr = getattr(self, "_lazy_values", None)
        key_transform = self._prop_to_json.get
        for k, conv_f in self._late_init_to:
            if lazy_attr is not None and k in lazy_attr:
                value = lazy_attr[k]
            else:
                value = getattr(self, k)
                if value is not None:
                    value = conv_f(value, kwargs)
            if value is not None:
                result.append((key_transform(k, k), value))
        return dict_factory(result)
