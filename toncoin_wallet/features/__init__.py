"""Feature modules for Toncoin Wallet.

- account: Wallet information, jetton wallets and raw node calls
- fees: Simulated miner fees and the platform fee schedule
- transfer: Jetton envelopes and the max amount solver
- history: Paged transaction history
"""
