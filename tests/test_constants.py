import pytest

from artto_handler.constants import (
    CHAINS,
    DEFAULT_RPC_URLS,
    SUPPORTED_CHAINS,
    UnsupportedChainError,
    WRAPPED_NATIVE_TOKENS,
    resolve_chain,
)


def test_supported_chains_match_expected():
    assert SUPPORTED_CHAINS == ["Ethereum", "Base", "Zora", "Shape"]
    assert set(CHAINS) == set(SUPPORTED_CHAINS)


def test_default_rpc_urls_match_expected():
    assert DEFAULT_RPC_URLS["Ethereum"] == "https://eth-mainnet.g.alchemy.com/v2/"
    assert DEFAULT_RPC_URLS["Base"] == "https://base-mainnet.g.alchemy.com/v2/"


def test_rpc_url_appends_credential():
    assert resolve_chain("Base").rpc_url("key") == "https://base-mainnet.g.alchemy.com/v2/key"


def test_wrapped_native_tokens_are_addresses():
    assert WRAPPED_NATIVE_TOKENS["Ethereum"] == "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
    for address in WRAPPED_NATIVE_TOKENS.values():
        assert address.startswith("0x") and len(address) == 42


def test_resolve_chain_returns_descriptor():
    base = resolve_chain("Base")
    assert base.chain_id == 8453
    assert base.wrapped_native_token == "0x4200000000000000000000000000000000000006"


@pytest.mark.parametrize("name", ["base", "BASE", "Polygon", "", None])
def test_resolve_chain_rejects_unknown_names(name):
    with pytest.raises(UnsupportedChainError):
        resolve_chain(name)
