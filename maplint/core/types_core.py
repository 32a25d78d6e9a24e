# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Minimal type core shared by the type checker and the lints.

TypeIds are opaque ints indexing into a TypeTable. TypeKind keeps the universe
small; TypeDef carries kind/name/params for inspection. Types are interned,
so structurally equal types share a TypeId and can be compared with `==`.

The table also answers the two questions lints ask:
  * `is_option(ty)`: is this the two-variant Option family?
  * `is_copy(ty)`: can values be used from two places without moving?
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Optional, Sequence, Tuple


TypeId = int  # opaque handle into the TypeTable

SCALAR_NAMES = frozenset(
	{
		"i8", "i16", "i32", "i64", "i128", "isize",
		"u8", "u16", "u32", "u64", "u128", "usize",
		"f32", "f64", "bool", "char",
	}
)


class TypeKind(Enum):
	"""Kinds of types understood by the minimal type core."""

	SCALAR = auto()
	UNIT = auto()
	STR = auto()       # unsized string slice (`str`; usually behind a ref)
	STRING = auto()    # owned String
	REF = auto()
	OPTION = auto()
	VEC = auto()
	SLICE = auto()
	ARRAY = auto()
	TUPLE = auto()     # param_types = element types, arity >= 1
	RANGE = auto()
	FUNCTION = auto()  # fn item; param_types = (*params, ret)
	CLOSURE = auto()   # closure value; param_types = (*params, ret)
	ADT = auto()       # any other named type
	UNKNOWN = auto()


@dataclass(frozen=True)
class TypeDef:
	"""Definition of a type stored in the TypeTable."""

	kind: TypeKind
	name: str
	param_types: Tuple[TypeId, ...] = ()
	ref_mut: bool | None = None  # only meaningful for TypeKind.REF


class TypeTable:
	"""Interning table that owns TypeIds."""

	def __init__(self) -> None:
		self._defs: Dict[TypeId, TypeDef] = {}
		self._ids: Dict[TypeDef, TypeId] = {}
		self._next_id: TypeId = 1  # reserve 0 for "invalid"

	def _add(self, td: TypeDef) -> TypeId:
		existing = self._ids.get(td)
		if existing is not None:
			return existing
		ty_id = self._next_id
		self._next_id += 1
		self._defs[ty_id] = td
		self._ids[td] = ty_id
		return ty_id

	def get(self, ty: TypeId) -> TypeDef:
		return self._defs[ty]

	# Constructors

	def scalar(self, name: str) -> TypeId:
		"""Register (or fetch) a scalar type such as `i32` or `bool`."""
		if name not in SCALAR_NAMES:
			raise ValueError(f"not a scalar type: {name}")
		return self._add(TypeDef(TypeKind.SCALAR, name))

	def ensure_unit(self) -> TypeId:
		return self._add(TypeDef(TypeKind.UNIT, "()"))

	def ensure_str(self) -> TypeId:
		return self._add(TypeDef(TypeKind.STR, "str"))

	def ensure_string(self) -> TypeId:
		return self._add(TypeDef(TypeKind.STRING, "String"))

	def ensure_unknown(self) -> TypeId:
		return self._add(TypeDef(TypeKind.UNKNOWN, "Unknown"))

	def new_ref(self, inner: TypeId, *, is_mut: bool = False) -> TypeId:
		return self._add(TypeDef(TypeKind.REF, "&mut" if is_mut else "&", (inner,), ref_mut=is_mut))

	def new_option(self, inner: TypeId) -> TypeId:
		return self._add(TypeDef(TypeKind.OPTION, "Option", (inner,)))

	def new_vec(self, elem: TypeId) -> TypeId:
		return self._add(TypeDef(TypeKind.VEC, "Vec", (elem,)))

	def new_slice(self, elem: TypeId) -> TypeId:
		return self._add(TypeDef(TypeKind.SLICE, "[]", (elem,)))

	def new_array(self, elem: TypeId) -> TypeId:
		return self._add(TypeDef(TypeKind.ARRAY, "[;]", (elem,)))

	def new_tuple(self, elems: Sequence[TypeId]) -> TypeId:
		if not elems:
			return self.ensure_unit()
		return self._add(TypeDef(TypeKind.TUPLE, "()", tuple(elems)))

	def new_range(self, elem: TypeId) -> TypeId:
		return self._add(TypeDef(TypeKind.RANGE, "Range", (elem,)))

	def new_function(self, params: Sequence[TypeId], ret: TypeId) -> TypeId:
		return self._add(TypeDef(TypeKind.FUNCTION, "fn", (*params, ret)))

	def new_closure(self, params: Sequence[TypeId], ret: TypeId) -> TypeId:
		return self._add(TypeDef(TypeKind.CLOSURE, "closure", (*params, ret)))

	def new_adt(self, name: str, args: Sequence[TypeId] = ()) -> TypeId:
		return self._add(TypeDef(TypeKind.ADT, name, tuple(args)))

	# Queries

	def is_option(self, ty: Optional[TypeId]) -> bool:
		return ty is not None and self.get(ty).kind is TypeKind.OPTION

	def option_inner(self, ty: TypeId) -> Optional[TypeId]:
		td = self.get(ty)
		return td.param_types[0] if td.kind is TypeKind.OPTION else None

	def is_copy(self, ty: Optional[TypeId]) -> bool:
		"""
		Return True if values of `ty` are trivially duplicable.

		Unknown types are treated as move-only.
		"""
		if ty is None:
			return False
		td = self.get(ty)
		if td.kind in (TypeKind.SCALAR, TypeKind.UNIT, TypeKind.FUNCTION):
			return True
		if td.kind is TypeKind.REF:
			return not td.ref_mut
		if td.kind in (TypeKind.OPTION, TypeKind.ARRAY):
			return self.is_copy(td.param_types[0])
		if td.kind is TypeKind.TUPLE:
			return all(self.is_copy(p) for p in td.param_types)
		return False

	def peel_refs(self, ty: TypeId) -> TypeId:
		"""Strip any number of reference layers (auto-deref for method lookup)."""
		td = self.get(ty)
		while td.kind is TypeKind.REF:
			ty = td.param_types[0]
			td = self.get(ty)
		return ty


__all__ = ["TypeId", "TypeKind", "TypeDef", "TypeTable", "SCALAR_NAMES"]
