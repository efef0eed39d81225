from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, List

from src.core.config import OracleSettings, SaleSettings
from src.core.domain.errors import PresaleError
from src.core.domain.tier import DEFAULT_TIERS, Tier
from src.core.domain.units import ONE_UNIT, validate_amount, value_to_cents
from src.exchange.bulk_exchange import InMemoryTokenContract
from src.oracle.channel import FeeAccount, InMemoryOracleChannel
from src.pricing.tier_policy import TierPricingPolicy
from src.sale.funds import InMemoryFundsGateway
from src.sale.token_sale import PreSaleToken


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _parse_sold(raw: str | None) -> List[int]:
    if not raw:
        return [0] * len(DEFAULT_TIERS)
    try:
        sold = [validate_amount(int(x), "--sold") for x in raw.split(",")]
    except ValueError as e:
        raise SystemExit(f"--sold must be non-negative integers: {e}") from None
    if len(sold) != len(DEFAULT_TIERS):
        raise SystemExit(f"--sold needs {len(DEFAULT_TIERS)} comma-separated values")
    return sold


def _require_amount(value: int | None, flag: str) -> None:
    if value is None:
        return
    try:
        validate_amount(value, flag)
    except ValueError as e:
        raise SystemExit(str(e)) from None


def cmd_quote(args: argparse.Namespace) -> int:
    _require_amount(args.value, "--value")
    _require_amount(args.rate, "--rate")
    _require_amount(args.available, "--available")
    sold = _parse_sold(args.sold)
    try:
        tiers = [
            Tier(limit=t.limit, sold=s, unit_price_cents=t.unit_price_cents)
            for t, s in zip(DEFAULT_TIERS, sold)
        ]
    except ValueError as e:
        raise SystemExit(f"--sold exceeds a tier limit: {e}") from None
    policy = TierPricingPolicy(tiers)

    value_cents = value_to_cents(args.value, args.rate)
    available = args.available if args.available is not None else sum(t.remaining for t in tiers)
    quote = policy.quote(value_cents, available)

    print("--- TIER QUOTE ---")
    print(f"Payment       : {args.value} wei ({args.value / ONE_UNIT:.6f} units)")
    print(f"Rate          : {args.rate} cents/unit")
    print(f"Value         : {value_cents} cents")
    for fill in quote.fills:
        print(
            f"Tier {fill.tier_index + 1}        : {fill.tokens} tokens "
            f"@ {fill.unit_price_cents}c = {fill.cost_cents} cents"
        )
    print("-" * 18)
    print(f"Tokens        : {quote.tokens}")
    print(f"Cost          : {quote.cost_cents} cents")
    print(f"Unspent       : {quote.leftover_cents} cents")
    return 0 if quote.tokens else 1


def _run_operation(
    token: PreSaleToken, op: Dict[str, Any], exchange_target: InMemoryTokenContract
) -> Any:
    kind = op["op"]
    if kind == "callback":
        return token.oracle_callback(
            op["sender"], op.get("query_id", "manual"), str(op["result"])
        )
    if kind == "pay":
        return token.receive_payment(op["payer"], int(op["value"]))
    if kind == "transfer":
        return token.transfer(op["caller"], op["to"], int(op["amount"]))
    if kind == "burn":
        return token.burn(op["caller"], int(op["amount"]))
    if kind == "update":
        return token.update(int(op.get("delay", 0)))
    if kind == "fund":
        return token.fund_queries(int(op["amount"]))
    if kind == "exchange":
        return token.exchange_to_ico(op["caller"], exchange_target, int(op["multiplier"]))
    if kind == "set_owner":
        return token.set_owner(op["caller"], op["new_owner"])
    if kind == "kill":
        return token.kill(op["caller"])
    raise SystemExit(f"Unknown operation: {kind!r}")


def cmd_simulate(args: argparse.Namespace) -> int:
    log = logging.getLogger("simulate")

    with open(args.scenario, "r", encoding="utf-8") as f:
        scenario = json.load(f)

    settings = SaleSettings(
        owner=scenario["owner"],
        initial_supply=int(scenario["initial_supply"]),
        oracle=OracleSettings(
            oracle_address=scenario["oracle_address"],
            query_fee=int(scenario.get("query_fee", 0)),
        ),
    )
    channel = InMemoryOracleChannel(fee=settings.oracle.query_fee)
    funds = InMemoryFundsGateway()
    token = PreSaleToken(
        settings,
        channel=channel,
        funds=funds,
        fee_account=FeeAccount(int(scenario.get("fee_funds", 0))),
    )

    exchange_target = InMemoryTokenContract()
    failures = 0
    for i, op in enumerate(scenario.get("operations", []), start=1):
        try:
            result = _run_operation(token, op, exchange_target)
            log.info("#%d %s -> %s", i, op["op"], result)
        except PresaleError as e:
            failures += 1
            log.warning("#%d %s reverted: %s: %s", i, op["op"], type(e).__name__, e)

    snapshot = token.state_snapshot().model_dump(mode="json")
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            json.dump(snapshot, f, indent=2)
        print(f"Wrote state snapshot: {args.out}")
    else:
        print(json.dumps(snapshot, indent=2))

    print(f"Operations    : {len(scenario.get('operations', []))}")
    print(f"Reverted      : {failures}")
    if exchange_target.credits:
        print(f"ICO credited  : {sum(exchange_target.credits.values())}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="presale-engine",
        description="Tiered pre-sale token engine tools.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")

    sub = p.add_subparsers(dest="cmd", required=True)

    q = sub.add_parser("quote", help="Show how a payment is spread across tiers.")
    q.add_argument("--value", required=True, type=int, help="Payment value in wei.")
    q.add_argument("--rate", required=True, type=int, help="Rate in cents per unit.")
    q.add_argument(
        "--sold", default=None, help="Already sold per tier, e.g. 100,0,0."
    )
    q.add_argument(
        "--available",
        default=None,
        type=int,
        help="Beneficiary balance (defaults to total remaining tier capacity).",
    )
    q.set_defaults(func=cmd_quote)

    s = sub.add_parser("simulate", help="Run a JSON scenario against an in-memory token.")
    s.add_argument("--scenario", required=True, help="Path to scenario JSON.")
    s.add_argument("--out", default=None, help="Write final state snapshot JSON here.")
    s.set_defaults(func=cmd_simulate)

    return p


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.verbose)
    raise SystemExit(args.func(args))
