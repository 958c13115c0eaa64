"""Wallet balances over Solana JSON-RPC"""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional

from autofolio_config import SolanaConfig, get_config
from autofolio_core import BalanceSource, BalanceSourceError
from .http import request_json

LAMPORTS_PER_SOL = 1_000_000_000


class SolanaBalanceSource(BalanceSource):
    """Native SOL plus SPL token balances, keyed by configured asset symbol"""

    def __init__(self, config: Optional[SolanaConfig] = None,
                 token_mints: Optional[Dict[str, str]] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or get_config().solana
        if token_mints is None:
            token_mints = get_config().prices.token_mints
        self.mint_to_symbol = {mint: symbol for symbol, mint in token_mints.items()}
        self.logger = logger or logging.getLogger(__name__)
        self._request_id = 0

    async def get_balances(self, wallet_address: str) -> Dict[str, float]:
        """
        Get held quantities for a wallet.

        Token accounts whose mint is not configured are ignored. Several
        accounts of the same mint (wrapped SOL included) add up.

        Raises:
            BalanceSourceError: RPC failure or malformed response
        """
        if not wallet_address:
            raise BalanceSourceError("Wallet address is required")

        lamports = await self._rpc('getBalance', [wallet_address])
        balances: Dict[str, float] = defaultdict(float)
        balances['SOL'] = self._parse_lamports(lamports) / LAMPORTS_PER_SOL

        token_accounts = await self._rpc('getTokenAccountsByOwner', [
            wallet_address,
            {'programId': self.config.token_program_id},
            {'encoding': 'jsonParsed'}
        ])

        for account in self._parse_token_accounts(token_accounts):
            symbol = self.mint_to_symbol.get(account['mint'])
            if symbol is None:
                self.logger.debug(f"Ignoring token account with unknown mint {account['mint']}")
                continue
            balances[symbol] += account['amount']

        self.logger.info(
            f"Balances for {wallet_address}: "
            + ", ".join(f"{symbol}={amount:,.6f}" for symbol, amount in balances.items())
        )
        return dict(balances)

    async def _rpc(self, method: str, params: list) -> Any:
        self._request_id += 1
        response = await request_json(
            'POST',
            self.config.rpc_url,
            payload={'jsonrpc': '2.0', 'id': self._request_id, 'method': method, 'params': params},
            timeout_seconds=self.config.request_timeout_seconds,
            error_cls=BalanceSourceError,
            logger=self.logger
        )

        if not isinstance(response, dict):
            raise BalanceSourceError(f"{method} response must be a JSON object")
        if 'error' in response:
            error = response['error'] or {}
            message = error.get('message', error) if isinstance(error, dict) else error
            raise BalanceSourceError(f"{method} failed: {message}")
        if 'result' not in response:
            raise BalanceSourceError(f"{method} response has no result")

        return response['result']

    def _parse_lamports(self, result: Any) -> int:
        value = result.get('value') if isinstance(result, dict) else None
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise BalanceSourceError(f"Unexpected getBalance result: {result!r}")
        return value

    def _parse_token_accounts(self, result: Any) -> List[Dict[str, Any]]:
        accounts = result.get('value') if isinstance(result, dict) else None
        if not isinstance(accounts, list):
            raise BalanceSourceError(f"Unexpected getTokenAccountsByOwner result: {result!r}")

        parsed = []
        for account in accounts:
            try:
                info = account['account']['data']['parsed']['info']
                amount = info['tokenAmount']['uiAmount']
                parsed.append({'mint': info['mint'], 'amount': float(amount or 0.0)})
            except (KeyError, TypeError, ValueError) as e:
                raise BalanceSourceError(f"Malformed token account: {e}") from e
        return parsed
