"""
8080 命令マッピング定義。
各命令モジュールから関数をインポートし、オペコードと関数の対応表を構築します。

256個のオペコードのうち、予約済みの12個とHLT (0x76) は表に含めず、デコード時に致命的エラーとして扱います。
"""
from .alu import (
    decode_alu_r, decode_alu_immediate, decode_inr_dcr, decode_pair_op, decode_accumulator,
    execute_alu_r, execute_alu_immediate, execute_inr_dcr, execute_pair_op, execute_accumulator
)
from .load import (
    decode_lxi, decode_mvi, decode_mov, decode_stax_ldax, decode_direct, decode_push_pop, decode_exchange,
    execute_lxi, execute_mvi, execute_mov, execute_stax_ldax, execute_direct, execute_push_pop, execute_exchange
)
from .control import (
    decode_nop, decode_jump_call, decode_return, decode_rst, decode_pchl, decode_interrupt_enable, decode_io,
    execute_nop, execute_jump_call, execute_return, execute_rst, execute_pchl, execute_interrupt_enable, execute_io
)

HLT_OPCODE = 0x76

# 命令として定義されていないオペコード
RESERVED_OPCODES = frozenset([
    0x08, 0x10, 0x18, 0x20, 0x28, 0x30, 0x38,
    0xCB, 0xD9, 0xDD, 0xED, 0xFD,
])

DECODE_MAP = {
    0x00: decode_nop,
    0xC3: decode_jump_call, # JMP
    0xCD: decode_jump_call, # CALL
    0xC9: decode_return, # RET
    0xE9: decode_pchl,
    0xE3: decode_exchange, # XTHL
    0xEB: decode_exchange, # XCHG
    0xF9: decode_exchange, # SPHL
    0xF3: decode_interrupt_enable, # DI
    0xFB: decode_interrupt_enable, # EI
    0xD3: decode_io, # OUT
    0xDB: decode_io, # IN
    **{op: decode_direct for op in (0x22, 0x2A, 0x32, 0x3A)}, # SHLD, LHLD, STA, LDA
    **{op: decode_stax_ldax for op in (0x02, 0x12, 0x0A, 0x1A)},
    **{op: decode_accumulator for op in range(0x07, 0x40, 0x08)}, # RLC..CMC
    **{op: decode_lxi for op in range(0x01, 0x40, 0x10)}, # LXI B/D/H/SP
    **{op: decode_pair_op for op in range(0x03, 0x40, 0x10)}, # INX
    **{op: decode_pair_op for op in range(0x0B, 0x40, 0x10)}, # DCX
    **{op: decode_pair_op for op in range(0x09, 0x40, 0x10)}, # DAD
    **{op: decode_inr_dcr for op in range(0x04, 0x40, 0x08)}, # INR r
    **{op: decode_inr_dcr for op in range(0x05, 0x40, 0x08)}, # DCR r
    **{op: decode_mvi for op in range(0x06, 0x40, 0x08)}, # MVI r
    **{op: decode_mov for op in range(0x40, 0x80) if op != HLT_OPCODE},
    **{op: decode_alu_r for op in range(0x80, 0xC0)},
    **{op: decode_alu_immediate for op in range(0xC6, 0x100, 0x08)},
    **{op: decode_return for op in range(0xC0, 0x100, 0x08)}, # Rcc
    **{op: decode_jump_call for op in range(0xC2, 0x100, 0x08)}, # Jcc
    **{op: decode_jump_call for op in range(0xC4, 0x100, 0x08)}, # Ccc
    **{op: decode_rst for op in range(0xC7, 0x100, 0x08)},
    **{op: decode_push_pop for op in range(0xC5, 0x100, 0x10)}, # PUSH
    **{op: decode_push_pop for op in range(0xC1, 0x100, 0x10)}, # POP
}

EXECUTE_MAP = {
    0x00: execute_nop,
    0xC3: execute_jump_call,
    0xCD: execute_jump_call,
    0xC9: execute_return,
    0xE9: execute_pchl,
    0xE3: execute_exchange,
    0xEB: execute_exchange,
    0xF9: execute_exchange,
    0xF3: execute_interrupt_enable,
    0xFB: execute_interrupt_enable,
    0xD3: execute_io,
    0xDB: execute_io,
    **{op: execute_direct for op in (0x22, 0x2A, 0x32, 0x3A)},
    **{op: execute_stax_ldax for op in (0x02, 0x12, 0x0A, 0x1A)},
    **{op: execute_accumulator for op in range(0x07, 0x40, 0x08)},
    **{op: execute_lxi for op in range(0x01, 0x40, 0x10)},
    **{op: execute_pair_op for op in range(0x03, 0x40, 0x10)},
    **{op: execute_pair_op for op in range(0x0B, 0x40, 0x10)},
    **{op: execute_pair_op for op in range(0x09, 0x40, 0x10)},
    **{op: execute_inr_dcr for op in range(0x04, 0x40, 0x08)},
    **{op: execute_inr_dcr for op in range(0x05, 0x40, 0x08)},
    **{op: execute_mvi for op in range(0x06, 0x40, 0x08)},
    **{op: execute_mov for op in range(0x40, 0x80) if op != HLT_OPCODE},
    **{op: execute_alu_r for op in range(0x80, 0xC0)},
    **{op: execute_alu_immediate for op in range(0xC6, 0x100, 0x08)},
    **{op: execute_return for op in range(0xC0, 0x100, 0x08)},
    **{op: execute_jump_call for op in range(0xC2, 0x100, 0x08)},
    **{op: execute_jump_call for op in range(0xC4, 0x100, 0x08)},
    **{op: execute_rst for op in range(0xC7, 0x100, 0x08)},
    **{op: execute_push_pop for op in range(0xC5, 0x100, 0x10)},
    **{op: execute_push_pop for op in range(0xC1, 0x100, 0x10)},
}
