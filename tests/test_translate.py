import pytest

from tigerir.frame import WORD_SIZE, InFrame, InReg, ProcFrag, StringFrag, access_exp, machine
from tigerir.printtree import format_stm
from tigerir.temp import named_label, new_label
from tigerir.translate import (
    Cx,
    Ex,
    Nx,
    Oper,
    Translator,
    un_cx,
    un_ex,
    un_nx,
)
from tigerir.tree import (
    BinOp,
    BinOpExp,
    Call,
    CJump,
    Const,
    ESeq,
    ExpStm,
    Jump,
    LabelStm,
    Mem,
    Move,
    Name,
    RelOp,
    Seq,
    TempExp,
)


@pytest.fixture
def tr():
    return Translator()


def test_un_ex_of_ex_is_identity():
    exp = Const(3)
    assert un_ex(Ex(exp)) is exp


def test_un_ex_of_nx_wraps_with_zero():
    stm = ExpStm(Const(1))
    exp = un_ex(Nx(stm))
    assert isinstance(exp, ESeq)
    assert exp.stm is stm
    assert exp.exp.value == 0


def test_un_nx_strips_eseq_with_zero():
    stm = ExpStm(Const(1))
    assert un_nx(Ex(ESeq(stm, Const(0)))) is stm


def test_un_nx_of_plain_ex_wraps_in_exp_stm():
    exp = Const(5)
    stm = un_nx(Ex(exp))
    assert isinstance(stm, ExpStm)
    assert stm.exp is exp


def test_un_nx_of_nx_and_cx(tr):
    stm = ExpStm(Const(1))
    assert un_nx(Nx(stm)) is stm
    cond = tr.op_exp(Oper.LT, tr.int_exp(1), tr.int_exp(2))
    assert un_nx(cond) is cond.stm


def test_un_cx_of_nx_raises():
    with pytest.raises(ValueError):
        un_cx(Nx(ExpStm(Const(0))))


def test_un_cx_of_ex_compares_with_zero():
    exp = Const(7)
    cx = un_cx(Ex(exp))
    assert isinstance(cx.stm, CJump)
    assert cx.stm.op is RelOp.NE
    assert cx.stm.left is exp
    assert cx.stm.right.value == 0
    assert cx.stm.true_label is None and cx.stm.false_label is None


def test_un_ex_of_cx_patches_labels(tr):
    cond = tr.op_exp(Oper.LT, tr.int_exp(1), tr.int_exp(2))
    jump = cond.stm
    exp = un_ex(cond)
    first = exp.stm
    assert isinstance(first, Move) and first.src.value == 1
    result = first.dst.temp
    inner = exp.exp
    assert inner.stm is jump
    false_part = inner.exp
    assert isinstance(false_part.stm, LabelStm)
    assert false_part.stm.label is jump.false_label
    reset = false_part.exp
    assert reset.stm.src.value == 0
    assert reset.stm.dst.temp is result
    final = reset.exp
    assert final.stm.label is jump.true_label
    assert final.exp.temp is result


def test_arithmetic_op_yields_binop(tr):
    left, right = tr.int_exp(1), tr.int_exp(2)
    res = tr.op_exp(Oper.TIMES, left, right)
    assert isinstance(res, Ex)
    assert res.exp.op is BinOp.TIMES
    assert res.exp.left is left.exp and res.exp.right is right.exp


@pytest.mark.parametrize(
    "op, rel",
    [
        (Oper.EQ, RelOp.EQ),
        (Oper.LT, RelOp.LT),
        (Oper.LE, RelOp.LE),
        (Oper.GT, RelOp.GT),
        (Oper.GE, RelOp.GE),
    ],
)
def test_relational_op_yields_condition(tr, op, rel):
    res = tr.op_exp(op, tr.int_exp(1), tr.int_exp(2))
    assert isinstance(res, Cx)
    assert res.stm.op is rel
    assert res.trues == [(res.stm, "true_label")]
    assert res.falses == [(res.stm, "false_label")]


def test_not_equal_op_is_unsupported(tr):
    with pytest.raises(ValueError):
        tr.op_exp(Oper.NEQ, tr.int_exp(1), tr.int_exp(2))


def test_new_level_adds_static_link(tr):
    level = tr.new_level(tr.outermost, named_label("f"), [False, True])
    assert len(level.frame.formals) == 3
    assert level.frame.formals[0] == InFrame(-WORD_SIZE)
    assert len(level.formals) == 2
    assert isinstance(level.formals[0].access, InReg)
    assert level.formals[1].access == InFrame(-2 * WORD_SIZE)
    assert all(a.level is level for a in level.formals)
    assert level.parent is tr.outermost


def test_alloc_local(tr):
    level = tr.new_level(tr.outermost, named_label("g"), [])
    acc = tr.alloc_local(level, True)
    assert acc.level is level
    assert acc.access == InFrame(-2 * WORD_SIZE)
    assert isinstance(tr.alloc_local(level, False).access, InReg)


def test_simple_var_same_level(tr):
    level = tr.new_level(tr.outermost, named_label("h"), [])
    acc = tr.alloc_local(level, False)
    res = tr.simple_var(acc, level)
    assert isinstance(res.exp, TempExp)
    assert res.exp.temp is acc.access.temp


def test_simple_var_follows_static_link(tr):
    outer = tr.new_level(tr.outermost, named_label("outer"), [])
    inner = tr.new_level(outer, named_label("inner"), [])
    acc = tr.alloc_local(outer, True)
    exp = tr.simple_var(acc, inner).exp
    assert isinstance(exp, Mem)
    link = exp.addr.left
    assert isinstance(link, Mem)
    assert link.addr.left.temp is machine().fp
    assert link.addr.right.value == inner.frame.formals[0].offset
    assert exp.addr.right.value == acc.access.offset


def test_simple_var_not_visible_raises(tr):
    a = tr.new_level(tr.outermost, named_label("a"), [])
    b = tr.new_level(tr.outermost, named_label("b"), [])
    acc = tr.alloc_local(a, True)
    with pytest.raises(ValueError):
        tr.simple_var(acc, b)


def test_field_and_subscript(tr):
    rec = tr.int_exp(0)
    f = tr.field_var(rec, 2).exp
    assert isinstance(f, Mem)
    assert f.addr.right.value == 2 * WORD_SIZE
    s = tr.subscript_var(tr.int_exp(0), tr.int_exp(3)).exp
    assert s.addr.right.op is BinOp.TIMES
    assert s.addr.right.right.value == WORD_SIZE


def test_string_exp_records_fragment(tr):
    res = tr.string_exp("hello")
    assert len(tr.frags) == 1
    frag = tr.frags[0]
    assert isinstance(frag, StringFrag)
    assert frag.text == "hello"
    assert res.exp.label is frag.label


def test_call_to_outermost_has_no_static_link(tr):
    label = named_label("print")
    arg = tr.int_exp(1)
    res = tr.call_exp(label, [arg], tr.outermost, tr.outermost).exp
    assert isinstance(res, Call)
    assert res.fun.label is label
    assert res.args == [arg.exp]


def test_call_to_nested_passes_frame_pointer(tr):
    caller = tr.new_level(tr.outermost, named_label("caller"), [])
    callee = tr.new_level(caller, named_label("callee"), [False])
    arg = tr.int_exp(4)
    res = tr.call_exp(named_label("callee"), [arg], caller, callee).exp
    assert len(res.args) == 2
    assert res.args[0].temp is machine().fp
    assert res.args[1] is arg.exp


def test_string_cmp_calls_runtime(tr):
    res = tr.string_cmp(tr.nil_exp(), tr.nil_exp()).exp
    assert res.fun.label.name == "stringEqual"
    assert len(res.args) == 2


def test_record_exp(tr):
    a, b = tr.int_exp(1), tr.int_exp(2)
    res = tr.record_exp([a, b]).exp
    seq = res.stm
    alloc = seq.left
    assert alloc.src.fun.label.name == "allocRecord"
    assert alloc.src.args[0].value == 2 * WORD_SIZE
    record = alloc.dst.temp
    first = seq.right
    assert first.left.src is a.exp
    assert first.left.dst.addr.right.value == 0
    second = first.right
    assert second.left.src is b.exp
    assert second.left.dst.addr.right.value == WORD_SIZE
    assert second.right.exp.value == 114
    assert res.exp.temp is record


def test_seq_exp(tr):
    head = tr.int_exp(1)
    assert tr.seq_exp(head, None) is head
    tail = tr.int_exp(2)
    res = tr.seq_exp(head, tail).exp
    assert isinstance(res.stm, ExpStm)
    assert res.exp is tail.exp


def test_list_to_exp(tr):
    items = [tr.int_exp(1), tr.int_exp(2), tr.int_exp(3)]
    res = tr.list_to_exp(items).exp
    assert res.exp is items[2].exp
    assert res.stm.exp.exp is items[1].exp
    with pytest.raises(ValueError):
        tr.list_to_exp([])


def test_assign_exp(tr):
    var, val = tr.int_exp(0), tr.int_exp(9)
    res = tr.assign_exp(var, val)
    assert isinstance(res, Nx)
    assert res.stm.dst is var.exp and res.stm.src is val.exp


def test_if_then_patches_both_targets(tr):
    cond = tr.op_exp(Oper.EQ, tr.int_exp(1), tr.int_exp(1))
    res = tr.if_then_exp(cond, tr.no_op())
    jump = res.stm.left
    assert jump is cond.stm
    assert res.stm.right.left.label is jump.true_label
    assert res.stm.right.right.right.label is jump.false_label
    assert "CJUMP(EQ" in format_stm(res.stm)


def test_if_then_else_joins_values(tr):
    cond = tr.op_exp(Oper.GT, tr.int_exp(1), tr.int_exp(0))
    res = tr.if_then_else_exp(cond, tr.int_exp(5), tr.int_exp(6)).exp
    jump = res.stm
    assert res.exp.stm.label is jump.true_label
    then_move = res.exp.exp.stm
    assert then_move.src.value == 5
    goto = res.exp.exp.exp.stm
    assert isinstance(goto, Jump)
    join = goto.jumps[0]
    false_part = res.exp.exp.exp.exp
    assert false_part.stm.label is jump.false_label
    else_move = false_part.exp.stm
    assert else_move.src.value == 6
    assert else_move.dst.temp is then_move.dst.temp
    last = false_part.exp.exp.exp
    assert last.stm.label is join
    assert last.exp.temp is then_move.dst.temp


def test_while_exp(tr):
    done = new_label()
    cond = tr.op_exp(Oper.LT, tr.int_exp(0), tr.int_exp(1))
    res = tr.while_exp(cond, tr.no_op(), done).stm
    test_label = res.left.label
    assert res.right.left is cond.stm
    assert cond.stm.false_label is done
    assert res.right.right.left.label is cond.stm.true_label
    back = res.right.right.right.right.left
    assert back.jumps == [test_label]
    assert res.right.right.right.right.right.label is done


def test_for_exp(tr):
    level = tr.new_level(tr.outermost, named_label("loop"), [])
    var = tr.alloc_local(level, False)
    done = new_label()
    res = tr.for_exp(var, level, tr.int_exp(1), tr.int_exp(10), tr.no_op(), done).stm
    assert res.left.dst.temp is var.access.temp
    check = res.right.right.left
    assert check.op is RelOp.GT
    assert check.true_label is done
    body_label = res.right.right.right.left.label
    assert check.false_label is body_label
    again = res.right.right.right.right.right.right.left
    assert again.op is RelOp.LE
    assert again.true_label is body_label and again.false_label is done


def test_array_exp(tr):
    res = tr.array_exp(tr.int_exp(4), tr.int_exp(0)).exp
    assert res.stm.src.fun.label.name == "initArray"
    assert res.exp is res.stm.dst


def test_break_exp(tr):
    label = new_label()
    res = tr.break_exp(label).stm
    assert isinstance(res, Jump)
    assert res.exp.label is label
    assert res.jumps == [label]


def test_var_dec(tr):
    level = tr.new_level(tr.outermost, named_label("vd"), [])
    acc = tr.alloc_local(level, True)
    init = tr.int_exp(3)
    res = tr.var_dec(acc, init).stm
    assert isinstance(res.dst, Mem)
    assert res.dst.addr.right.value == acc.access.offset
    assert res.src is init.exp


def test_proc_entry_exit_records_fragment(tr):
    level = tr.new_level(tr.outermost, named_label("p"), [])
    tr.proc_entry_exit(level, tr.int_exp(1))
    frag = tr.frags[-1]
    assert isinstance(frag, ProcFrag)
    assert frag.frame is level.frame
    assert isinstance(frag.body, Seq)


def test_proc_entry_exit_on_outermost_raises(tr):
    with pytest.raises(ValueError):
        tr.proc_entry_exit(tr.outermost, tr.int_exp(1))


def test_format_ir_dot(tr):
    tr.string_exp("abc")
    level = tr.new_level(tr.outermost, named_label("main"), [])
    tr.proc_entry_exit(level, tr.int_exp(7))
    text = tr.format_ir_dot()
    assert text.startswith('digraph "IR Tree"{\n')
    assert text.endswith("}\n")
    assert ": abc\"\n" in text
    assert "CONST 7" in text
    assert "1[label=SEQ]\n0 -> 1;\n" in text


def test_format_ir_dot_empty(tr):
    assert tr.format_ir_dot() == 'digraph "IR Tree"{\n}\n'


def test_no_op_and_nil_are_zero(tr):
    assert tr.no_op().exp.value == 0
    assert tr.nil_exp().exp.value == 0
    assert access_exp(InReg(machine().rax), Const(0)).temp is machine().rax