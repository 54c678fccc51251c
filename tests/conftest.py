import pytest

from dummycert.chain import createChain
from tests.chainutil import make_config


@pytest.fixture(scope="session")
def chain_config(tmp_path_factory):
    return make_config(tmp_path_factory.mktemp("chain"))


@pytest.fixture(scope="session")
def chain_dir(chain_config):
    createChain(chain_config)
    return chain_config.directory
