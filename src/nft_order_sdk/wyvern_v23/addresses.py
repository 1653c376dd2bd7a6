"""Wyvern v2.3 deployment addresses."""

EXCHANGE = {
    1: "0x7f268357A8c2552623316e2562D90e642bB538E5",
    4: "0xdD54D660178B28f6033a953b0E55073cFA7e3744",
}

PROXY_REGISTRY = {
    1: "0xa5409ec958C83C3f309868babACA7c86DCB077c1",
    4: "0xF57B2c51dED3A29e6891aba85459d600256Cf317",
}

TOKEN_TRANSFER_PROXY = {
    1: "0xE5c783EE536cf5E63E792988335c4255169be4E1",
    4: "0x82D102457854C985221249F86659C9d6cf12aA72",
}

# Validates token-list proofs and transfers the token, delegatecalled by the user proxy
MERKLE_VALIDATOR = {
    1: "0xBAf2127B49fC93CbcA6269FAdE0F7F31dF4c88a7",
    4: "0x45B594792a5CDc008D0dE1C1D69FAA3d16b3DDc1",
}
