import logging
from datetime import datetime, timezone

from hut.errors import AppError
from hut.models import new_payment, new_wallet_transaction
from hut.models.base import new_id
from hut.services.results import Outcome

logger = logging.getLogger(__name__)


class WalletService:
    def __init__(self, store):
        self.store = store

    @staticmethod
    def create_entry(data, user_id, entry_type, direction, amount, description, reference, related_payment_id=None):
        """Apply a signed wallet movement and append its ledger row.

        The user's ``wallet_balance`` is the running total; ledger rows record
        how it got there. A debit that would go below zero is refused.
        """
        user = next((item for item in data["users"] if item["id"] == user_id), None)
        if not user:
            return Outcome.failure("Wallet owner not found.", 404)

        amount = abs(amount)
        signed_amount = -amount if direction == "debit" else amount
        next_balance = round(float(user.get("wallet_balance") or 0) + signed_amount, 2)
        if next_balance < 0:
            return Outcome.failure("Insufficient wallet balance.", 402)

        user["wallet_balance"] = next_balance
        entry = new_wallet_transaction(
            user_id=user_id,
            type=entry_type,
            direction=direction,
            amount=amount,
            signed_amount=signed_amount,
            description=description,
            reference=reference,
            related_payment_id=related_payment_id,
            balance_after=next_balance,
        )
        data["wallet_transactions"].append(entry)
        return Outcome.success(entry)

    def top_up(self, user_id, amount, reference=None):
        try:
            amount = int(round(float(amount)))
        except (TypeError, ValueError) as exc:
            raise AppError("Top-up amount must be a number.", 400) from exc
        if amount <= 0:
            raise AppError("Top-up amount must be greater than zero.", 400)
        reference = (reference or "").strip() or f"BANK-{datetime.now(timezone.utc):%Y%m%d%H%M%S}"

        def mutator(data):
            user = next((item for item in data["users"] if item["id"] == user_id), None)
            if not user:
                return Outcome.failure("Wallet user not found.", 404)
            if user.get("role") == "hotel_admin":
                return Outcome.failure("Hotel admins cannot credit virtual wallets.", 403)

            payment_id = new_id()
            entry = WalletService.create_entry(
                data,
                user_id,
                "wallet_topup",
                "credit",
                amount,
                "Wallet top-up via transfer to platform account",
                reference,
                related_payment_id=payment_id,
            )
            if not entry.ok:
                return entry

            data["payments"].append(
                new_payment(
                    id=payment_id,
                    user_id=user_id,
                    transaction_ref=f"HUT-WTOP-{payment_id[:8].upper()}",
                    transaction_type="wallet_topup",
                    payment_provider="bank_transfer",
                    payment_external_id=reference,
                    gross_amount=amount,
                    platform_bank_account=data["platform"].get("bank_account"),
                )
            )
            return Outcome.success({"balance_after": entry.value["balance_after"], "entry": entry.value})

        result = self.store.write(mutator).unwrap()
        logger.info("Wallet top-up of %s for user %s", amount, user_id)
        return result

    def summary(self, user_id):
        snapshot = self.store.snapshot()
        user = next((item for item in snapshot["users"] if item["id"] == user_id), None)
        if not user:
            raise AppError("Wallet user not found.", 404)
        entries = [item for item in snapshot["wallet_transactions"] if item["user_id"] == user_id]
        entries.sort(key=lambda item: item.get("created_at") or "", reverse=True)
        return {"balance": user.get("wallet_balance", 0), "transactions": entries}
