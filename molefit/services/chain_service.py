"""
On-chain minting of achievement NFTs (ERC-721 `mintTo(address,string)`).

Minting is one operation with two signer variants:

- AdminKeySigner: the server builds, signs and broadcasts the transaction with
  the administrator key (server-triggered rewards).
- ConnectedWalletSigner: the patient's own wallet already signed and
  broadcast the transaction; the server only confirms the receipt before the
  result is recorded.

A broadcast transaction cannot be recalled, so callers must treat any error
raised after `mint()` returns as an off-chain inconsistency, not a mint failure.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from web3 import Web3
from web3.exceptions import TimeExhausted, TransactionNotFound, Web3Exception

from molefit.errors import ConfigurationError, MintError, RequestValidationError
from molefit.services.rewards import metadata_uri

logger = logging.getLogger(__name__)

ADMIN_KEY = "admin_key"
USER_WALLET = "user_wallet"

# caller roles: server-triggered rewards vs. a patient's own wallet
SERVER_ROLE = "server"
PATIENT_ROLE = "patient"

TRANSFER_TOPIC = Web3.keccak(text="Transfer(address,address,uint256)")

ERC721_MINT_ABI = [
    {
        "name": "mintTo",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "_to", "type": "address"},
            {"name": "_uri", "type": "string"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "Transfer",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "from", "type": "address"},
            {"indexed": True, "name": "to", "type": "address"},
            {"indexed": True, "name": "tokenId", "type": "uint256"},
        ],
    },
]


@dataclass
class MintResult:
    transaction_hash: str
    token_id: Optional[str]
    block_number: Optional[int]
    signer: str

    def to_dict(self):
        return {
            "transactionHash": self.transaction_hash,
            "tokenId": self.token_id,
            "blockNumber": self.block_number,
            "signer": self.signer,
        }


def _topic_bytes(topic):
    return bytes(topic) if not isinstance(topic, str) else bytes.fromhex(topic[2:] if topic.startswith("0x") else topic)


def token_id_from_receipt(receipt, contract_address, recipient=None):
    """
    Token id from the contract's ERC-721 Transfer log, or None if the receipt has none.
    With `recipient`, only a Transfer to that address counts.
    """
    wanted = contract_address.lower()
    for log in receipt.get("logs", []):
        if str(log.get("address", "")).lower() != wanted:
            continue
        topics = log.get("topics") or []
        if len(topics) != 4 or _topic_bytes(topics[0]) != bytes(TRANSFER_TOPIC):
            continue
        if recipient and _topic_bytes(topics[2])[-20:] != bytes.fromhex(recipient[2:].lower()):
            continue
        return str(int.from_bytes(_topic_bytes(topics[3]), "big"))
    return None


class AdminKeySigner:
    kind = ADMIN_KEY

    def __init__(self, private_key):
        if not private_key:
            raise ConfigurationError("ADMIN_PRIVATE_KEY")
        self.private_key = private_key

    def submit(self, chain, recipient, token_uri):
        w3 = chain.web3
        account = w3.eth.account.from_key(self.private_key)
        contract = chain.contract()

        tx = contract.functions.mintTo(Web3.to_checksum_address(recipient), token_uri).build_transaction({
            "from": account.address,
            "nonce": w3.eth.get_transaction_count(account.address),
            "chainId": chain.chain_id,
        })
        signed = account.sign_transaction(tx)
        tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
        logger.info("Mint transaction broadcast by admin %s: %s", account.address, Web3.to_hex(tx_hash))
        return w3.eth.wait_for_transaction_receipt(tx_hash, timeout=chain.receipt_timeout)


class ConnectedWalletSigner:
    kind = USER_WALLET

    def __init__(self, transaction_hash):
        if not transaction_hash:
            raise RequestValidationError("transactionHash is required for wallet-signed mints")
        self.transaction_hash = transaction_hash

    def submit(self, chain, recipient, token_uri):
        receipt = chain.web3.eth.wait_for_transaction_receipt(self.transaction_hash, timeout=chain.receipt_timeout)
        target = receipt.get("to")
        if not target or target.lower() != chain.contract_address.lower():
            raise MintError(f"Transaction {self.transaction_hash} was not sent to the NFT contract", status_code=400)
        if token_id_from_receipt(receipt, chain.contract_address, recipient) is None:
            raise MintError(f"Transaction {self.transaction_hash} did not mint a token to {recipient}", status_code=400)
        return receipt


def select_signer(role, transaction_hash=None, admin_private_key=None):
    """Patients who bring a wallet-signed transaction keep their signature; everyone else uses the admin key."""
    if role == PATIENT_ROLE and transaction_hash:
        return ConnectedWalletSigner(transaction_hash)
    return AdminKeySigner(admin_private_key)


class ChainClient:
    def __init__(self, rpc_url=None, chain_id=80002, contract_address=None, thirdweb_client_id=None,
                 thirdweb_secret_key=None, receipt_timeout=120, web3=None):
        self.rpc_url = rpc_url
        self.chain_id = int(chain_id)
        self.contract_address = contract_address
        self.thirdweb_client_id = thirdweb_client_id
        self.thirdweb_secret_key = thirdweb_secret_key
        self.receipt_timeout = receipt_timeout
        self._web3 = web3

    def resolved_rpc_url(self):
        if self.rpc_url:
            return self.rpc_url
        if self.thirdweb_client_id:
            return f"https://{self.chain_id}.rpc.thirdweb.com/{self.thirdweb_client_id}"
        raise ConfigurationError("CHAIN_RPC_URL")

    @property
    def web3(self):
        if self._web3 is None:
            headers = {"x-secret-key": self.thirdweb_secret_key} if self.thirdweb_secret_key else {}
            provider = Web3.HTTPProvider(self.resolved_rpc_url(), request_kwargs={"timeout": 60, "headers": headers})
            self._web3 = Web3(provider)
        return self._web3

    def contract(self):
        if not self.contract_address:
            raise ConfigurationError("NFT_CONTRACT_ADDRESS")
        return self.web3.eth.contract(address=Web3.to_checksum_address(self.contract_address), abi=ERC721_MINT_ABI)

    def mint(self, recipient, metadata, signer):
        if not self.contract_address:
            raise ConfigurationError("NFT_CONTRACT_ADDRESS")
        if not Web3.is_address(recipient):
            raise RequestValidationError(f"Invalid wallet address: {recipient}")

        try:
            receipt = signer.submit(self, recipient, metadata_uri(metadata))
        except (TimeExhausted, TransactionNotFound) as e:
            raise MintError(f"Mint transaction was not confirmed: {e}") from e
        except Web3Exception as e:
            raise MintError(str(e)) from e

        if receipt.get("status") != 1:
            raise MintError(f"Mint transaction {Web3.to_hex(receipt['transactionHash'])} reverted")

        result = MintResult(
            transaction_hash=Web3.to_hex(receipt["transactionHash"]),
            token_id=token_id_from_receipt(receipt, self.contract_address, recipient),
            block_number=receipt.get("blockNumber"),
            signer=signer.kind,
        )
        logger.info("NFT minted to %s in tx %s (token %s)", recipient, result.transaction_hash, result.token_id)
        return result

    def check_connection(self, admin_private_key=None):
        w3 = self.web3
        status = {
            "connected": w3.is_connected(),
            "chainId": self.chain_id,
            "contractAddress": self.contract_address,
        }
        if admin_private_key:
            status["adminAddress"] = w3.eth.account.from_key(admin_private_key).address
        if status["connected"]:
            status["blockNumber"] = w3.eth.block_number
        return status
