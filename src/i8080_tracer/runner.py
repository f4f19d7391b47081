# i8080_tracer/runner.py
"""
バッチ実行ドライバとコマンドラインエントリポイント。

イメージを読み込み、PCがイメージ末尾に達するか最大ステップ数に達するまで命令を実行します。
致命的なオペコードやメモリ範囲外アクセスはここで報告され、実行が終了します。
"""
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

import click

from i8080_tracer import __version__
from i8080_tracer.arch.i8080.cpu import I8080Cpu
from i8080_tracer.config.builder import SystemBuilder
from i8080_tracer.config.loader import ConfigLoader
from i8080_tracer.config.models import SystemConfig
from i8080_tracer.core.snapshot import Snapshot
from i8080_tracer.errors import EmulationError, FatalOpcodeError, MemoryBoundsError

logger = logging.getLogger(__name__)


class StopReason(Enum):
    END_OF_IMAGE = "end_of_image"
    MAX_STEPS = "max_steps"
    FAULT = "fault"


# @intent:responsibility 1回の実行結果を保持します。
@dataclass
class RunResult:
    steps: int
    reason: StopReason
    fault: Optional[EmulationError] = None
    last_snapshot: Optional[Snapshot] = None

    @property
    def ok(self) -> bool:
        return self.fault is None


# @intent:responsibility PCがstop_at以上になるか、max_steps命令を実行するまでCPUを進めます。
# @intent:post-condition 致命的なエラーは捕捉され、RunResult.faultに記録されます。再試行は行いません。
def run(cpu: I8080Cpu, max_steps: int, stop_at: Optional[int] = None) -> RunResult:
    steps = 0
    snapshot = None
    logger.info("Run started at PC=%#06x (max_steps=%d)", cpu.get_state().pc, max_steps)

    while steps < max_steps:
        if stop_at is not None and cpu.get_state().pc >= stop_at:
            logger.info("Reached end of image at PC=%#06x after %d steps", cpu.get_state().pc, steps)
            return RunResult(steps, StopReason.END_OF_IMAGE, last_snapshot=snapshot)
        try:
            snapshot = cpu.step()
        except FatalOpcodeError as e:
            logger.error("Fatal opcode 0x%02X at PC=%#06x: %s", e.opcode, e.pc, e)
            return RunResult(steps, StopReason.FAULT, fault=e, last_snapshot=snapshot)
        except MemoryBoundsError as e:
            logger.error("Memory fault at PC=%#06x: %s", cpu.get_state().pc, e)
            return RunResult(steps, StopReason.FAULT, fault=e, last_snapshot=snapshot)
        steps += 1

    logger.info("Step limit of %d reached at PC=%#06x", max_steps, cpu.get_state().pc)
    return RunResult(steps, StopReason.MAX_STEPS, last_snapshot=snapshot)


def _format_dump(cpu: I8080Cpu) -> str:
    dump = cpu.dump()
    regs = " ".join(f"{name}={value:0{4 if len(name) == 2 else 2}X}" for name, value in dump.registers().items())
    flags = " ".join(f"{name}={value}" for name, value in dump.flags().items())
    return f"{regs} | {flags} | INTE={dump.int_enable}"


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "image",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-c", "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML system description (memory size, address policy, flag policy, I/O map)",
)
@click.option(
    "-n", "--max-steps",
    type=int,
    default=None,
    help="Maximum number of instructions to execute (default: 100000 or config value)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Logging level. DEBUG traces every executed instruction.",
)
@click.version_option(version=__version__, prog_name="i8080-trace")
def main(image: Path, config_path: Optional[Path], max_steps: Optional[int], log_level: str) -> None:
    """
    Execute an 8080 program image from address 0.

    IMAGE is the raw binary loaded verbatim at address 0. Execution stops when
    PC reaches the end of the image, the step limit is hit, or a fatal opcode
    (reserved, unimplemented, HLT) or out-of-range memory access occurs.
    """
    logging.basicConfig(level=getattr(logging, log_level.upper()), format="%(levelname)s %(name)s: %(message)s")

    try:
        config = ConfigLoader().load_from_file(str(config_path)) if config_path else SystemConfig()
        cpu, _ = SystemBuilder().build_system(config)
        data = image.read_bytes()
        cpu.load_image(data)
    except (EmulationError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    result = run(cpu, max_steps if max_steps is not None else config.max_steps, stop_at=len(data))
    logger.info("%s", _format_dump(cpu))
    if not result.ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
