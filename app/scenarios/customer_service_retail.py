"""
Customer service scenario: four agents in a full mesh.

Any agent can hand off to any other. Authentication runs first, verifies the
contractor and routes them to returns or sales; simulatedHuman stands in for a
human escalation.
"""

from typing import Any, Dict, List

from pydantic import Field

from app.agents.graph import AgentDefinition
from app.agents.tools import ToolArguments, ToolContext, ToolDefinition
from app.scenarios.sample_data import EXAMPLE_ACCOUNT_INFO

COMPANY_NAME = "Kojo Technologies"

AGENT_NAMES = ["authentication", "returns", "sales", "simulatedHuman"]

SAMPLE_ORDERS = [
    {
        "order_id": "KT-ORD-1001",
        "order_date": "2024-05-02",
        "status": "Delivered",
        "delivered_date": "2024-05-06",
        "items": [
            {"description": "1/2 in EMT conduit, 10 ft", "quantity": 40, "unit_price": 6.25},
            {"description": "12 AWG THHN copper wire, 500 ft", "quantity": 2, "unit_price": 118.0},
        ],
    },
    {
        "order_id": "KT-ORD-1017",
        "order_date": "2024-05-19",
        "status": "In Transit",
        "items": [
            {"description": "200A main breaker panel", "quantity": 1, "unit_price": 389.0},
        ],
    },
]

RETURN_WINDOW_DAYS = 30

PROMOTIONS = {
    "electrical": [
        {"name": "Conduit Bulk Discount", "detail": "8% off EMT and PVC conduit orders over 500 ft"},
        {"name": "Wire Spool Rebate", "detail": "$20 rebate per 1000 ft spool of THHN"},
    ],
    "plumbing": [
        {"name": "Copper Fitting Bundle", "detail": "15% off fittings bought with Type L copper pipe"},
    ],
    "lumber": [
        {"name": "Framing Package", "detail": "Free delivery on framing packages over $2,500"},
    ],
}


class AuthenticateArguments(ToolArguments):
    company_name: str = Field(..., description="Contractor company name as given by the caller.")
    account_id: str = Field(..., description="Kojo account id, e.g. KT-123456.")
    phone: str = Field(..., description="Phone number on the account.")


class LookupOrdersArguments(ToolArguments):
    account_id: str = Field(..., description="Authenticated Kojo account id.")


class ReturnEligibilityArguments(ToolArguments):
    order_id: str = Field(..., description="Order containing the item to return.")
    item_description: str = Field(..., description="Which item the caller wants to return.")
    reason: str = Field(..., description="Why the caller wants to return it.")


class PromotionArguments(ToolArguments):
    category: str = Field(..., description="Trade category, e.g. electrical, plumbing, lumber.")


def authenticate_contractor(params: AuthenticateArguments, context: ToolContext) -> Dict[str, Any]:
    matched = (
        params.account_id.strip().upper() == EXAMPLE_ACCOUNT_INFO["accountId"]
        and params.company_name.strip().lower() == EXAMPLE_ACCOUNT_INFO["companyName"].lower()
    )
    if matched:
        context.data["authenticated_account"] = EXAMPLE_ACCOUNT_INFO["accountId"]
    return {"authenticated": matched}


def lookup_orders(params: LookupOrdersArguments, context: ToolContext) -> Dict[str, Any]:
    if context.data.get("authenticated_account") != params.account_id:
        return {"error": "Account must be authenticated before orders can be listed"}
    return {"orders": SAMPLE_ORDERS}


def check_return_eligibility(params: ReturnEligibilityArguments, context: ToolContext) -> Dict[str, Any]:
    order = next((o for o in SAMPLE_ORDERS if o["order_id"] == params.order_id), None)
    if order is None:
        return {"eligible": False, "rationale": f"No order found with id {params.order_id}"}
    if order["status"] != "Delivered":
        return {"eligible": False, "rationale": "Only delivered orders can be returned"}
    context.add_breadcrumb("Return eligibility checked", {"order_id": params.order_id})
    return {
        "eligible": True,
        "rationale": f"Delivered within the {RETURN_WINDOW_DAYS}-day return window",
        "next_steps": "A return label will be emailed to the address on file.",
    }


def lookup_promotions(params: PromotionArguments, context: ToolContext) -> Dict[str, Any]:
    return {"promotions": PROMOTIONS.get(params.category.strip().lower(), [])}


AUTHENTICATION_INSTRUCTIONS = """You are the first agent a Kojo Technologies caller reaches. Greet the caller, then verify who they are before anything else.

- Collect the company name, the Kojo account id and the phone number on the account, one at a time. Repeat each value back to confirm it.
- Call authenticateContractor only when you have all three values from the caller. Never guess or fill in a value.
- If authentication fails, ask the caller to double check the details. After two failures, offer a transfer to simulatedHuman.
- Once authenticated, route returns questions to returns and buying questions to sales.
"""

RETURNS_INSTRUCTIONS = """You handle returns for Kojo Technologies contractors.

- Use lookupOrders to find the caller's recent orders and confirm which item they mean.
- Ask for the reason before calling checkReturnEligibility. Explain the result plainly.
- If the caller is not authenticated yet, hand off to authentication.
- For new purchases hand off to sales. If the caller asks for a person, hand off to simulatedHuman.
"""

SALES_INSTRUCTIONS = """You help Kojo Technologies contractors find materials and current promotions.

- Ask what trade and materials the caller is working with, then use lookupPromotions for that category.
- Only mention promotions returned by the tool.
- Hand off to returns for returns, to authentication if account details are needed, and to simulatedHuman on request.
"""

SIMULATED_HUMAN_INSTRUCTIONS = """You are a placeholder human agent at Kojo Technologies. Tell the caller you are a human representative, keep answers short and friendly, and hand back to authentication, returns or sales when the caller's request fits one of them."""


def _tool(name: str, description: str, parameters, execute) -> ToolDefinition:
    return ToolDefinition(name=name, description=description, parameters=parameters, execute=execute)


def build_agents() -> List[AgentDefinition]:
    def peers(name: str) -> List[str]:
        return [other for other in AGENT_NAMES if other != name]

    return [
        AgentDefinition(
            name="authentication",
            voice="sage",
            instructions=AUTHENTICATION_INSTRUCTIONS,
            tools=[
                _tool(
                    "authenticateContractor",
                    "Verify a contractor using company name, account id and phone number.",
                    AuthenticateArguments,
                    authenticate_contractor,
                )
            ],
            handoffs=peers("authentication"),
            handoff_description="Verifies the caller's identity and account before other requests.",
        ),
        AgentDefinition(
            name="returns",
            voice="sage",
            instructions=RETURNS_INSTRUCTIONS,
            tools=[
                _tool("lookupOrders", "List recent orders for an authenticated account.", LookupOrdersArguments, lookup_orders),
                _tool(
                    "checkReturnEligibility",
                    "Check whether an item from an order can be returned.",
                    ReturnEligibilityArguments,
                    check_return_eligibility,
                ),
            ],
            handoffs=peers("returns"),
            handoff_description="Handles returns and order issues for delivered materials.",
        ),
        AgentDefinition(
            name="sales",
            voice="sage",
            instructions=SALES_INSTRUCTIONS,
            tools=[
                _tool("lookupPromotions", "Current promotions for a trade category.", PromotionArguments, lookup_promotions)
            ],
            handoffs=peers("sales"),
            handoff_description="Helps contractors find materials and current promotions.",
        ),
        AgentDefinition(
            name="simulatedHuman",
            voice="sage",
            instructions=SIMULATED_HUMAN_INSTRUCTIONS,
            handoffs=peers("simulatedHuman"),
            handoff_description="Placeholder human agent for escalations.",
        ),
    ]
