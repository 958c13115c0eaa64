import unittest
from unittest.mock import AsyncMock, patch

from autofolio_config import SolanaConfig
from autofolio_core import BalanceSourceError
from portfolio_monitor.services import SolanaBalanceSource

WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
TOKEN_MINTS = {
    "SOL": "So11111111111111111111111111111111111111112",
    "USDC": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
}


def token_account(mint, ui_amount):
    return {
        "pubkey": "acct",
        "account": {"data": {"parsed": {"info": {
            "mint": mint,
            "owner": WALLET,
            "tokenAmount": {"amount": "0", "decimals": 6, "uiAmount": ui_amount},
        }}}},
    }


def rpc_responder(lamports=0, accounts=None, errors=None):
    """Build a request_json side effect answering getBalance and getTokenAccountsByOwner"""
    errors = errors or {}

    async def respond(method, url, *, payload, **kwargs):
        rpc_method = payload["method"]
        if rpc_method in errors:
            return {"jsonrpc": "2.0", "id": payload["id"], "error": errors[rpc_method]}
        if rpc_method == "getBalance":
            result = {"context": {"slot": 1}, "value": lamports}
        else:
            result = {"context": {"slot": 1}, "value": accounts or []}
        return {"jsonrpc": "2.0", "id": payload["id"], "result": result}

    return respond


class TestSolanaBalanceSource(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.config = SolanaConfig(rpc_url="https://rpc.test")
        self.source = SolanaBalanceSource(self.config, token_mints=TOKEN_MINTS)
        patcher = patch('portfolio_monitor.services.balance_service.request_json', new_callable=AsyncMock)
        self.request_json = patcher.start()
        self.addCleanup(patcher.stop)

    async def test_native_and_token_balances(self):
        self.request_json.side_effect = rpc_responder(
            lamports=2_500_000_000,
            accounts=[token_account(TOKEN_MINTS["USDC"], 125.5)]
        )

        balances = await self.source.get_balances(WALLET)

        self.assertEqual(balances, {"SOL": 2.5, "USDC": 125.5})

    async def test_rpc_requests(self):
        self.request_json.side_effect = rpc_responder()

        await self.source.get_balances(WALLET)

        first, second = self.request_json.await_args_list
        self.assertEqual(first.args, ('POST', "https://rpc.test"))
        self.assertEqual(first.kwargs['payload']['method'], 'getBalance')
        self.assertEqual(first.kwargs['payload']['params'], [WALLET])
        self.assertEqual(second.kwargs['payload']['method'], 'getTokenAccountsByOwner')
        self.assertEqual(second.kwargs['payload']['params'], [
            WALLET,
            {'programId': self.config.token_program_id},
            {'encoding': 'jsonParsed'},
        ])
        self.assertIs(first.kwargs['error_cls'], BalanceSourceError)

    async def test_wrapped_sol_adds_to_native(self):
        self.request_json.side_effect = rpc_responder(
            lamports=1_000_000_000,
            accounts=[token_account(TOKEN_MINTS["SOL"], 0.5)]
        )

        balances = await self.source.get_balances(WALLET)

        self.assertEqual(balances["SOL"], 1.5)

    async def test_accounts_of_same_mint_add_up(self):
        self.request_json.side_effect = rpc_responder(accounts=[
            token_account(TOKEN_MINTS["USDC"], 10.0),
            token_account(TOKEN_MINTS["USDC"], 15.0),
        ])

        balances = await self.source.get_balances(WALLET)

        self.assertEqual(balances["USDC"], 25.0)

    async def test_unknown_mints_are_ignored(self):
        self.request_json.side_effect = rpc_responder(accounts=[
            token_account("DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263", 1_000_000.0),
        ])

        balances = await self.source.get_balances(WALLET)

        self.assertEqual(balances, {"SOL": 0.0})

    async def test_null_ui_amount_counts_as_zero(self):
        self.request_json.side_effect = rpc_responder(accounts=[token_account(TOKEN_MINTS["USDC"], None)])

        balances = await self.source.get_balances(WALLET)

        self.assertEqual(balances["USDC"], 0.0)

    async def test_rpc_error_raises(self):
        self.request_json.side_effect = rpc_responder(
            errors={"getBalance": {"code": -32602, "message": "Invalid param: WrongSize"}}
        )

        with self.assertRaises(BalanceSourceError) as ctx:
            await self.source.get_balances(WALLET)

        self.assertIn("WrongSize", str(ctx.exception))

    async def test_malformed_token_account_raises(self):
        self.request_json.side_effect = rpc_responder(accounts=[{"account": {"data": "base64"}}])

        with self.assertRaises(BalanceSourceError):
            await self.source.get_balances(WALLET)

    async def test_missing_result_raises(self):
        self.request_json.return_value = {"jsonrpc": "2.0", "id": 1}

        with self.assertRaises(BalanceSourceError):
            await self.source.get_balances(WALLET)

    async def test_empty_address_raises(self):
        with self.assertRaises(BalanceSourceError):
            await self.source.get_balances("")

        self.request_json.assert_not_awaited()


if __name__ == '__main__':
    unittest.main()
