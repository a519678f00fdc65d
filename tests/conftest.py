from __future__ import annotations

import pytest

from artifactfs.store import ArtifactStore


@pytest.fixture
def store() -> ArtifactStore:
    return ArtifactStore()


@pytest.fixture
def src_store(store: ArtifactStore) -> ArtifactStore:
    """/src/a.ts, /src/b.ts, /src2/c.ts"""
    store.create_file("/src/a.ts", "export const a = 1;")
    store.create_file("/src/b.ts", "export const b = 2;")
    store.create_file("/src2/c.ts", "export const c = 3;")
    return store
