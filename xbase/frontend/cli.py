"""
表文件维护命令行工具
"""

from __future__ import annotations

from typing import Tuple

import click

from ..storage import Table, WritableTable
from ..storage.constants import DEFAULT_ENCODING
from ..storage.edit_mode import EditMode
from ..utils.exceptions import XBaseError
from ..utils.logging import get_logger


def _open_writable(ctx: click.Context, path: str) -> WritableTable:
    mode = EditMode.REALTIME if ctx.obj["realtime"] else EditMode.CLONE
    return WritableTable(path, edit_mode=mode, encoding=ctx.obj["encoding"])


@click.group()
@click.option('--encoding', default=DEFAULT_ENCODING, show_default=True, help='字符列编码')
@click.option('--realtime', is_flag=True, help='直接修改原文件（默认在副本上修改后替换）')
@click.option('-v', '--verbose', is_flag=True, help='输出调试日志')
@click.pass_context
def cli(ctx: click.Context, encoding: str, realtime: bool, verbose: bool):
    """表文件(.dbf)维护工具"""
    ctx.ensure_object(dict)
    ctx.obj["encoding"] = encoding
    ctx.obj["realtime"] = realtime
    if verbose:
        get_logger("xbase", "DEBUG")


@cli.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def info(ctx: click.Context, path: str):
    """显示文件头与列信息"""
    try:
        with Table(path, encoding=ctx.obj["encoding"]) as table:
            header = table.header
            click.echo(f"版本: 0x{header.version:02X}")
            click.echo(f"记录数: {header.record_count}")
            click.echo(f"文件头长度: {header.length}")
            click.echo(f"记录长度: {header.record_byte_length}")
            click.echo(f"最后更新: {header.last_update}")
            for column in table.columns:
                click.echo(f"  {column.name:<10} {column.type} {column.length:>3} {column.decimal}")
    except XBaseError as e:
        raise click.ClickException(str(e))


@cli.command(name='list')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--deleted/--no-deleted', default=False, help='同时列出已删除记录')
@click.pass_context
def list_records(ctx: click.Context, path: str, deleted: bool):
    """按顺序列出记录"""
    try:
        with Table(path, encoding=ctx.obj["encoding"]) as table:
            memo_names = {c.key for c in table.memo_columns()}
            for record in table.records(include_deleted=deleted):
                values = []
                for column in table.columns:
                    if column.key in memo_names:
                        value = table.get_memo(record, column.name)
                    else:
                        value = record.get(column.name)
                    values.append(f"{column.name}={value!r}")
                flag = "*" if record.is_deleted() else " "
                click.echo(f"{record.index:>6} {flag} " + ", ".join(values))
    except XBaseError as e:
        raise click.ClickException(str(e))


@cli.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.argument('indexes', type=int, nargs=-1, required=True)
@click.pass_context
def delete(ctx: click.Context, path: str, indexes: Tuple[int, ...]):
    """标记记录为已删除"""
    try:
        with _open_writable(ctx, path) as table:
            for index in indexes:
                table.delete_record(table.move_to(index))
            table.save()
    except XBaseError as e:
        raise click.ClickException(str(e))
    click.echo(f"已删除 {len(indexes)} 条记录")


@cli.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.argument('indexes', type=int, nargs=-1, required=True)
@click.pass_context
def undelete(ctx: click.Context, path: str, indexes: Tuple[int, ...]):
    """恢复已删除记录"""
    try:
        with _open_writable(ctx, path) as table:
            for index in indexes:
                table.undelete_record(table.move_to(index))
            table.save()
    except XBaseError as e:
        raise click.ClickException(str(e))
    click.echo(f"已恢复 {len(indexes)} 条记录")


@cli.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def pack(ctx: click.Context, path: str):
    """移除已删除记录并回收备注空间"""
    try:
        with _open_writable(ctx, path) as table:
            before = table.record_count
            table.pack()
            table.save()
            after = table.record_count
    except XBaseError as e:
        raise click.ClickException(str(e))
    click.echo(f"pack 完成: {before} -> {after}")


if __name__ == '__main__':
    cli()
