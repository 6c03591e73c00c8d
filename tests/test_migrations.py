"""Tests for Alembic database migrations."""

import subprocess
import sys
from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory

from terramine import models  # noqa: F401
from terramine.database import Base

ROOT = Path(__file__).parent.parent


def _script_dir() -> ScriptDirectory:
    return ScriptDirectory.from_config(Config(str(ROOT / "alembic.ini")))


def test_alembic_no_multiple_heads():
    """Verify that the migration chain has no multiple heads."""
    result = subprocess.run(
        [sys.executable, "-m", "alembic", "heads"],
        capture_output=True,
        text=True,
        cwd=ROOT,
    )

    assert result.returncode == 0, f"alembic heads failed: {result.stderr}"

    heads = [line for line in result.stdout.strip().split("\n") if line and "(head)" in line]
    assert len(heads) == 1, f"Expected 1 head, found {len(heads)}: {heads}"


def test_migration_chain_is_linear():
    """Verify the migration chain has proper linear dependencies."""
    revisions = list(_script_dir().walk_revisions())
    revision_map = {rev.revision: rev for rev in revisions}

    for rev in revisions:
        if rev.down_revision is not None:
            assert isinstance(
                rev.down_revision, str
            ), f"Revision {rev.revision} has multiple parents (merge migration): {rev.down_revision}"
            assert (
                rev.down_revision in revision_map
            ), f"Revision {rev.revision} references non-existent down_revision: {rev.down_revision}"

    bases = [rev for rev in revisions if rev.down_revision is None]
    assert len(bases) == 1


def test_every_model_table_is_created_by_a_migration():
    """Each table on the declarative metadata appears in some revision."""
    sources = "\n".join(
        Path(rev.path).read_text() for rev in _script_dir().walk_revisions()
    )
    for table_name in Base.metadata.tables:
        assert f"'{table_name}'" in sources, f"No migration creates {table_name}"


def test_check_in_uniqueness_is_migrated():
    """The once-per-day check-in constraint must exist in the schema."""
    sources = "\n".join(
        Path(rev.path).read_text() for rev in _script_dir().walk_revisions()
    )
    assert "uq_check_ins_visitor_property_day" in sources
