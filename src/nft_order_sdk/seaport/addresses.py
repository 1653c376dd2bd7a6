"""Seaport deployment addresses."""

# Seaport 1.1 (same address on every chain)
EXCHANGE = {
    1: "0x00000000006c3852cbEf3e08E8dF289169EdE581",
    4: "0x00000000006c3852cbEf3e08E8dF289169EdE581",
}

CONDUIT_CONTROLLER = {
    1: "0x00000000F9490004C11Cca813E4000a5F9A6C8e0",
    4: "0x00000000F9490004C11Cca813E4000a5F9A6C8e0",
}

OPENSEA_CONDUIT_KEY = {
    1: "0x0000007b02230091a7ed01230072f7006a004d60a8d4e71d599b8104250f0000",
    4: "0x0000007b02230091a7ed01230072f7006a004d60a8d4e71d599b8104250f0000",
}
