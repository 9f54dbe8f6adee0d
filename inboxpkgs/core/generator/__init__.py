"""框架内置包表生成

- evaluator.py: 包评估（正式版本降序扫描）
- runtime_graph.py: 运行时依赖图 / 依赖链合并
- overrides.py: 版本覆盖
- reducer.py: 框架归约
- builder.py: 构建管线
- emitter.py: YAML 输出
"""

from inboxpkgs.core.generator.builder import FamilyTables, FrameworkTableBuilder
from inboxpkgs.core.generator.emitter import emit_tables
from inboxpkgs.core.generator.evaluator import PackageEvaluator
from inboxpkgs.core.generator.overrides import apply_overrides, parse_overrides
from inboxpkgs.core.generator.reducer import reduce_against_base, reduce_tables
from inboxpkgs.core.generator.runtime_graph import RuntimeGraphMerger

__all__ = [
    "FamilyTables",
    "FrameworkTableBuilder",
    "PackageEvaluator",
    "RuntimeGraphMerger",
    "apply_overrides",
    "emit_tables",
    "parse_overrides",
    "reduce_against_base",
    "reduce_tables",
]
