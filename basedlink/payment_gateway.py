"""
On-chain payment settlement for content tiers.

The facilitator wallet pays gas: it submits the user's signed payment to the
payment contract, or pulls USDC through a pre-approved allowance. Submitted
transactions are never retried here; the caller resubmits.
"""

import asyncio
import logging
from typing import Any, Dict, Tuple

from eth_account import Account
from web3 import Web3

from basedlink.config import Settings
from basedlink.schemas import PaymentRequest


logger = logging.getLogger("basedlink.payment")

USDC_DECIMALS = 6
TIER_PRICES: Dict[int, int] = {
    1: 5 * 10 ** USDC_DECIMALS,   # $5
    2: 15 * 10 ** USDC_DECIMALS,  # $15
    3: 30 * 10 ** USDC_DECIMALS,  # $30
}
FAUCET_AMOUNT = 100 * 10 ** USDC_DECIMALS

_PAYMENT_ARGS = [
    {"name": "user", "type": "address"},
    {"name": "tier", "type": "uint256"},
    {"name": "contentId", "type": "string"},
    {"name": "nonce", "type": "uint256"},
    {"name": "deadline", "type": "uint256"},
    {"name": "signature", "type": "bytes"},
]

PAYMENT_CONTRACT_ABI = [
    {
        "type": "function",
        "name": "verifyPaymentSignature",
        "stateMutability": "view",
        "inputs": _PAYMENT_ARGS,
        "outputs": [{"name": "", "type": "bool"}, {"name": "", "type": "string"}],
    },
    {
        "type": "function",
        "name": "executePayment",
        "stateMutability": "nonpayable",
        "inputs": _PAYMENT_ARGS,
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "getTierPrice",
        "stateMutability": "view",
        "inputs": [{"name": "tier", "type": "uint256"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]

ERC20_ABI = [
    {
        "type": "function",
        "name": "transfer",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "to", "type": "address"}, {"name": "amount", "type": "uint256"}],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "allowance",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}, {"name": "spender", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "balanceOf",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "transferFrom",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "from", "type": "address"},
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]


class PaymentError(Exception):
    """Payment failure with the HTTP status and JSON body it maps to."""

    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_payload(self) -> Dict[str, Any]:
        return {"success": False, "error": self.message, **self.extra}


class InvalidPaymentSignature(PaymentError):
    status_code = 402


class InvalidTier(PaymentError):
    status_code = 400


class InsufficientAllowance(PaymentError):
    status_code = 400

    def __init__(self, message: str = "Insufficient USDC allowance. Please enable permissionless mode first."):
        super().__init__(message, needsApproval=True)


class InsufficientBalance(PaymentError):
    status_code = 400

    def __init__(self, message: str = "Insufficient USDC balance"):
        super().__init__(message)


class InvalidAddress(PaymentError):
    status_code = 400


class ChainCallError(PaymentError):
    status_code = 500


class PaymentConfigError(PaymentError):
    status_code = 500


def tier_price(tier: int) -> int:
    try:
        return TIER_PRICES[int(tier)]
    except (KeyError, TypeError, ValueError):
        raise InvalidTier("Invalid tier") from None


class PaymentGateway:
    def __init__(
        self,
        w3: Web3,
        account: Any,
        payment_contract: Any,
        token_contract: Any,
        receipt_timeout: int = 120,
    ):
        self.w3 = w3
        self.account = account
        self.payment_contract = payment_contract
        self.token_contract = token_contract
        self.receipt_timeout = receipt_timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "PaymentGateway":
        if not settings.facilitator_private_key:
            raise PaymentConfigError("Payment gateway is not configured")
        w3 = Web3(Web3.HTTPProvider(settings.rpc_url, request_kwargs={"timeout": 30}))
        account = Account.from_key(settings.facilitator_private_key)
        payment_contract = None
        if settings.payment_contract_address:
            payment_contract = w3.eth.contract(
                address=Web3.to_checksum_address(settings.payment_contract_address),
                abi=PAYMENT_CONTRACT_ABI,
            )
        token_contract = w3.eth.contract(
            address=Web3.to_checksum_address(settings.mock_usdc_address),
            abi=ERC20_ABI,
        )
        logger.info("Facilitator address: %s", account.address)
        return cls(w3, account, payment_contract, token_contract, settings.chain_receipt_timeout_sec)

    @property
    def facilitator_address(self) -> str:
        return self.account.address

    # --- blocking web3 helpers (run in worker threads) ---

    def _send_transaction(self, contract_call) -> str:
        """Sign and broadcast a contract call from the facilitator wallet."""
        nonce = self.w3.eth.get_transaction_count(self.account.address, "pending")
        tx = contract_call.build_transaction({
            "from": self.account.address,
            "nonce": nonce,
        })
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(tx_hash)

    def _wait_for_confirmation(self, tx_hash: str) -> str:
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        if receipt["status"] != 1:
            raise ChainCallError("Transaction reverted")
        confirmed = receipt.get("transactionHash")
        if not confirmed:
            return tx_hash
        return confirmed if isinstance(confirmed, str) else Web3.to_hex(confirmed)

    def _payment_args(self, request: PaymentRequest) -> Tuple[Any, ...]:
        return (
            Web3.to_checksum_address(request.user),
            int(request.tier),
            request.content_id,
            int(request.nonce),
            int(request.deadline),
            Web3.to_bytes(hexstr=request.signature),
        )

    def _verify_signature(self, args: Tuple[Any, ...]) -> Tuple[bool, str]:
        is_valid, reason = self.payment_contract.functions.verifyPaymentSignature(*args).call()
        return bool(is_valid), str(reason or "")

    # --- async API ---

    async def settle_payment(self, request: PaymentRequest) -> str:
        """Verify the signed payment on-chain, execute it and wait for one confirmation."""
        if self.payment_contract is None:
            raise PaymentConfigError("Payment contract is not configured")
        logger.info("Processing payment for user %s, tier %s", request.user, request.tier)
        try:
            args = self._payment_args(request)
        except ValueError:
            raise InvalidAddress("Invalid user address or signature") from None

        try:
            is_valid, reason = await asyncio.to_thread(self._verify_signature, args)
        except Exception as exc:
            logger.error("Verification error: %s", exc)
            raise ChainCallError("Contract verification failed") from exc
        if not is_valid:
            logger.warning("Invalid signature: %s", reason)
            raise InvalidPaymentSignature(reason or "Invalid payment signature")

        logger.info("Executing payment transaction...")
        try:
            call = self.payment_contract.functions.executePayment(*args)
            tx_hash = await asyncio.to_thread(self._send_transaction, call)
        except Exception as exc:
            logger.error("Execution error: %s", exc)
            raise ChainCallError("Transaction execution failed") from exc
        logger.info("Tx sent: %s", tx_hash)

        confirmed = await self._confirm(tx_hash)
        logger.info("Tx confirmed: %s", confirmed)
        return confirmed

    async def execute_permissionless(self, user_address: str, tier: int) -> str:
        """Pull the tier price from the user through an existing USDC allowance."""
        amount = tier_price(tier)
        try:
            user = Web3.to_checksum_address(user_address)
        except ValueError:
            raise InvalidAddress("Invalid userAddress") from None
        facilitator = self.facilitator_address
        logger.info("Execute (permissionless) for %s, tier %s", user, tier)

        allowance = await self._read(self.token_contract.functions.allowance(user, facilitator))
        if allowance < amount:
            logger.warning("Insufficient allowance: %s < %s", allowance, amount)
            raise InsufficientAllowance()

        balance = await self._read(self.token_contract.functions.balanceOf(user))
        if balance < amount:
            logger.warning("Insufficient balance: %s < %s", balance, amount)
            raise InsufficientBalance()

        logger.info("Executing transferFrom...")
        try:
            call = self.token_contract.functions.transferFrom(user, facilitator, amount)
            tx_hash = await asyncio.to_thread(self._send_transaction, call)
        except Exception as exc:
            logger.error("transferFrom error: %s", exc)
            raise ChainCallError(f"Transaction execution failed: {exc}") from exc
        logger.info("Tx sent: %s", tx_hash)
        return await self._confirm(tx_hash)

    async def send_faucet(self, user_address: str, amount: int = FAUCET_AMOUNT) -> str:
        """Send test USDC from the facilitator wallet."""
        try:
            user = Web3.to_checksum_address(user_address)
        except ValueError:
            raise InvalidAddress("Invalid userAddress") from None
        logger.info("Faucet request for: %s", user)
        try:
            call = self.token_contract.functions.transfer(user, amount)
            tx_hash = await asyncio.to_thread(self._send_transaction, call)
        except Exception as exc:
            logger.error("Faucet error: %s", exc)
            raise ChainCallError(str(exc) or "Faucet failed") from exc
        logger.info("Faucet tx sent: %s", tx_hash)
        return await self._confirm(tx_hash)

    async def _read(self, contract_call) -> Any:
        try:
            return await asyncio.to_thread(contract_call.call)
        except Exception as exc:
            logger.error("Contract read failed: %s", exc)
            raise ChainCallError(f"Contract read failed: {exc}") from exc

    async def _confirm(self, tx_hash: str) -> str:
        try:
            return await asyncio.to_thread(self._wait_for_confirmation, tx_hash)
        except PaymentError:
            raise
        except Exception as exc:
            logger.error("Confirmation error for %s: %s", tx_hash, exc)
            raise ChainCallError("Transaction confirmation failed") from exc
