import argparse

import pytest

from delete_worker import RunStats


@pytest.fixture
def stats():
    return RunStats()


@pytest.fixture
def make_args():
    def _make(query="", no_from=False, no_before=False, timers=False, no_batch=False):
        return argparse.Namespace(
            query=query,
            no_from=no_from,
            no_before=no_before,
            timers=timers,
            no_batch=no_batch,
            verbose=False,
        )
    return _make
