# tigerir

Building blocks for the middle of a Tiger language compiler: symbol tables,
temporaries and labels, semantic types, the IR tree language, an x86-64 stack
frame layout, and translation of Tiger constructs into IR trees. A small
Python implementation of the Tiger runtime library is included as well.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `tigerir.table` – `Table`, a mapping in which new bindings shadow older
  ones; `pop` removes the newest binding and `dump` lists every binding,
  newest first.
- `tigerir.symbol` – interned `Symbol`s via `symbol(name)` and `SymbolTable`
  with `begin_scope` / `end_scope`.
- `tigerir.temp` – `Temp`, `new_temp`, `new_label`, `named_label`, layered
  `TempMap`s (`enter`, `look`, `layered`, `dump`), `name_map()`, and list
  helpers `temp_list_union`, `temp_list_diff`, `replace_temp` and
  `format_temps`.
- `tigerir.types` – Tiger semantic types (`TyKind`, `Ty`, `RecordTy`,
  `ArrayTy`, `NameTy`, `TyField`) and `describe` / `describe_list` for
  debugging output.
- `tigerir.tree` – IR statements and expressions (`Seq`, `LabelStm`, `Jump`,
  `CJump`, `Move`, `ExpStm`, `BinOpExp`, `Mem`, `TempExp`, `ESeq`, `Name`,
  `Const`, `Call`), the `BinOp` and `RelOp` enums, plus `not_rel` and
  `commute`.
- `tigerir.printtree` – indented text rendering of IR trees
  (`format_stm`, `format_exp`, `format_stm_list`, `print_stm_list`).
- `tigerir.frame` – x86-64 frames: `Frame` with `alloc_local`, `InFrame` /
  `InReg` accesses and `access_exp`, the register set from `machine()`,
  `StringFrag` / `ProcFrag` fragments, `external_call` and
  `proc_entry_exit1`.
- `tigerir.translate` – the `Translator`, turning Tiger constructs into IR
  (`Ex`, `Nx`, `Cx` wrappers with `un_ex`, `un_nx`, `un_cx`; `Level` and
  `Access` with static links; the `Oper` enum; fragments collected in
  `Translator.frags`, and a Graphviz rendering through `format_ir_dot`).
- `tigerir.runtime` – the runtime library over `bytes` strings:
  `init_array`, `alloc_record`, `string_equal`, `substring`, `concat`,
  `tiger_chr`, `tiger_ord`, `tiger_size`, `tiger_not`, `tiger_print`,
  `tiger_printi`, `tiger_flush` and `tiger_getchar`. Out-of-range arguments
  raise `TigerRuntimeError`.

## Example

```python
from tigerir.symbol import symbol
from tigerir.translate import Translator, Oper
from tigerir.printtree import format_stm_list

tr = Translator()
level = tr.new_level(tr.outermost, symbol("tigermain"), [])
body = tr.op_exp(Oper.PLUS, tr.int_exp(1), tr.int_exp(2))
tr.proc_entry_exit(level, body)

for frag in tr.frags:
    print(format_stm_list([frag.body]))
```

## What this package does not do

It is a library of compiler stages, not a compiler. There is no lexer or
parser for Tiger source, no abstract syntax tree and no type checker that
walks one, so the `Translator` has to be driven by your own front end. There
is no canonicalisation of trees, instruction selection, liveness analysis or
register allocation, no assembly output, and no command-line program.