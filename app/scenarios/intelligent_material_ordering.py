"""
Catalog-driven material ordering with a cart.

The agent parses a free-form request, asks for each missing catalog field in turn,
and manages a cart. The cart lives in the session's tool context (context.data),
so concurrent sessions never see each other's items.
"""

import random
import re
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import Field

from app.agents.graph import AgentDefinition
from app.agents.tools import ToolArguments, ToolContext, ToolDefinition

COMPANY_NAME = "Kojo Technologies"

CART_KEY = "cart"

MATERIAL_CATALOG: Dict[str, Dict[str, Any]] = {
    "pvc_pipe": {
        "name": "PVC Pipe",
        "required_fields": ["diameter", "length", "quantity", "pressure_rating"],
        "optional_fields": ["color", "fitting_type"],
        "validation_rules": {
            "diameter": {
                "type": "enum",
                "values": ['1/2"', '3/4"', '1"', '1.25"', '1.5"', '2"', '3"', '4"', '6"', '8"'],
                "message": 'Diameter? (1/2", 3/4", 1", 2", 4")',
            },
            "length": {"type": "enum", "values": ["10ft", "20ft"], "message": "Length? (10ft or 20ft)"},
            "quantity": {"type": "number", "message": "How many pieces?"},
            "pressure_rating": {
                "type": "enum",
                "values": ["Schedule 40", "Schedule 80", "DWV", "Class 200", "Class 315"],
                "message": "Pressure rating? (Schedule 40, 80, DWV)",
            },
        },
    },
    "copper_pipe": {
        "name": "Copper Pipe",
        "required_fields": ["diameter", "length", "quantity", "type"],
        "optional_fields": ["temper"],
        "validation_rules": {
            "diameter": {
                "type": "enum",
                "values": [
                    '1/4"', '3/8"', '1/2"', '5/8"', '3/4"', '7/8"',
                    '1"', '1.125"', '1.25"', '1.375"', '1.625"', '2.125"',
                ],
                "message": 'Diameter? (1/2", 3/4", 1")',
            },
            "length": {"type": "enum", "values": ["10ft", "20ft"], "message": "Length? (10ft or 20ft)"},
            "quantity": {"type": "number", "message": "How many pieces?"},
            "type": {
                "type": "enum",
                "values": ["Type K", "Type L", "Type M", "DWV"],
                "message": "Type? (K, L, M, DWV)",
            },
        },
    },
    "electrical_wire": {
        "name": "Electrical Wire",
        "required_fields": ["gauge", "length", "quantity", "conductor_count", "insulation_type"],
        "optional_fields": ["color", "stranding"],
        "validation_rules": {
            "gauge": {
                "type": "enum",
                "values": [
                    "14 AWG", "12 AWG", "10 AWG", "8 AWG", "6 AWG",
                    "4 AWG", "2 AWG", "1 AWG", "1/0 AWG", "2/0 AWG",
                ],
                "message": "Gauge? (12, 14, 10 AWG)",
            },
            "length": {
                "type": "enum",
                "values": ["250ft", "500ft", "1000ft", "custom"],
                "message": "Length per roll? (250ft, 500ft, 1000ft)",
            },
            "quantity": {"type": "number", "message": "How many rolls?"},
            "conductor_count": {
                "type": "enum",
                "values": ["2-conductor", "3-conductor", "4-conductor", "single conductor"],
                "message": "Conductors? (single, 2, 3, 4)",
            },
            "insulation_type": {
                "type": "enum",
                "values": ["THHN", "THWN", "NM-B", "UF-B", "XHHW", "USE-2"],
                "message": "Insulation? (THHN, THWN, NM-B)",
            },
        },
    },
    "lumber": {
        "name": "Lumber",
        "required_fields": ["dimensions", "length", "quantity", "grade", "species"],
        "optional_fields": ["treatment", "moisture_content"],
        "validation_rules": {
            "dimensions": {
                "type": "enum",
                "values": [
                    "2x4", "2x6", "2x8", "2x10", "2x12", "1x4",
                    "1x6", "1x8", "1x10", "1x12", "4x4", "6x6",
                ],
                "message": "Size? (2x4, 2x6, 2x8)",
            },
            "length": {
                "type": "enum",
                "values": ["8ft", "10ft", "12ft", "14ft", "16ft", "20ft"],
                "message": "Length? (8ft, 10ft, 12ft, 16ft)",
            },
            "quantity": {"type": "number", "message": "How many pieces?"},
            "grade": {
                "type": "enum",
                "values": ["Construction", "Standard", "Utility", "Stud", "Select Structural", "No. 1", "No. 2"],
                "message": "Grade? (Construction, Stud, Standard)",
            },
            "species": {
                "type": "enum",
                "values": ["Douglas Fir", "Southern Pine", "Hem-Fir", "SPF", "Cedar", "Redwood", "Pressure Treated"],
                "message": "Species? (Doug Fir, PT, Cedar)",
            },
        },
    },
    "concrete": {
        "name": "Concrete",
        "required_fields": ["mix_design", "quantity", "delivery_method"],
        "optional_fields": ["additives", "slump"],
        "validation_rules": {
            "mix_design": {
                "type": "enum",
                "values": ["3000 PSI", "3500 PSI", "4000 PSI", "4500 PSI", "5000 PSI", "Fiber Mix", "High Early"],
                "message": "What concrete strength do you need? (3000 PSI, 4000 PSI, 5000 PSI, etc.)",
            },
            "quantity": {
                "type": "number_with_unit",
                "units": ["cubic yards", "cy", "cubic feet", "cf", "cubic meters", "m3"],
                "message": 'How much concrete do you need? (e.g., "5 cubic yards", "3.5 cy")',
            },
            "delivery_method": {
                "type": "enum",
                "values": ["Ready Mix Truck", "Pump Truck", "Wheelbarrow", "Conveyor"],
                "message": "How should the concrete be delivered? (Ready Mix Truck, Pump Truck, etc.)",
            },
        },
    },
}

LUMBER_DIMENSION = re.compile(r"(2x4|2x6|2x8|2x10|2x12|1x4|1x6|1x8|4x4|6x6)")
LENGTH = re.compile(r"(\d+(?:\.\d+)?)\s*(feet|foot|ft|meters?|m)\s*(of)?")
QUANTITY = re.compile(r"(\d+)\s*(pieces?|sticks?|rolls?|boards?)(?:\s+of)?")
LEADING_NUMBER = re.compile(r"^(\d+)\s+")
DIAMETER = re.compile(r"(\d+(?:/\d+)?)\s*(?:inch|in|\")")
GAUGE = re.compile(r"(\d+)\s*(?:awg|gauge)")
PSI = re.compile(r"(\d+)\s*psi")


def _cart(context: ToolContext) -> List[Dict[str, Any]]:
    return context.data.setdefault(CART_KEY, [])


def _material_name(material_type: str) -> str:
    return MATERIAL_CATALOG.get(material_type, {}).get("name", material_type)


def _line_items(cart: List[Dict[str, Any]]) -> int:
    return sum(item.get("quantity") or 1 for item in cart)


def detect_material_type(request: str) -> str:
    if "pvc" in request and "pipe" in request:
        return "pvc_pipe"
    if "copper" in request and "pipe" in request:
        return "copper_pipe"
    if "wire" in request or "electrical" in request:
        return "electrical_wire"
    if "lumber" in request or any(size in request for size in ("2x4", "2x6", "2x8")):
        return "lumber"
    if "concrete" in request:
        return "concrete"
    return ""


class ParseRequestArguments(ToolArguments):
    user_request: str = Field(..., description="The user's natural language material request")


class ValidateSpecsArguments(ToolArguments):
    material_type: str = Field(..., description="The type of material being ordered")
    specifications: Dict[str, Any] = Field(..., description="The specifications provided so far")


class AddToCartArguments(ToolArguments):
    material_type: str = Field(..., description="The type of material")
    specifications: Dict[str, Any] = Field(..., description="Complete and validated specifications")
    quantity: Optional[int] = Field(default=None, ge=1, description="Quantity of items (default: 1)")


class ViewCartArguments(ToolArguments):
    pass


class RemoveFromCartArguments(ToolArguments):
    item_id: str = Field(..., description="The ID of the item to remove")


class SubmitOrderArguments(ToolArguments):
    delivery_address: str = Field(..., description="Delivery address for the order")
    delivery_date: Optional[str] = Field(default=None, description="Requested delivery date")
    special_instructions: Optional[str] = Field(
        default=None, description="Any special delivery or handling instructions"
    )


def parse_material_request(params: ParseRequestArguments, context: ToolContext) -> Dict[str, Any]:
    request = params.user_request.lower()
    material_type = detect_material_type(request)
    specs: Dict[str, Any] = {}

    if material_type:
        match = LUMBER_DIMENSION.search(request)
        if match and material_type == "lumber":
            specs["dimensions"] = match.group(1)

        match = LENGTH.search(request)
        if match:
            specs["length"] = f"{match.group(1)}ft"

        match = QUANTITY.search(request) or LEADING_NUMBER.search(request)
        if match:
            specs["quantity"] = int(match.group(1))

        match = DIAMETER.search(request)
        if match and material_type in ("pvc_pipe", "copper_pipe"):
            specs["diameter"] = f'{match.group(1)}"'

        match = GAUGE.search(request)
        if match and material_type == "electrical_wire":
            specs["gauge"] = f"{match.group(1)} AWG"

        match = PSI.search(request)
        if match and material_type == "concrete":
            specs["mix_design"] = f"{match.group(1)} PSI"

    return {
        "material_type": material_type,
        "detected_specifications": specs,
        "confidence": "high" if material_type else "low",
        "original_request": params.user_request,
    }


def validate_material_specs(params: ValidateSpecsArguments, context: ToolContext) -> Dict[str, Any]:
    catalog_item = MATERIAL_CATALOG.get(params.material_type)
    if catalog_item is None:
        return {
            "is_valid": False,
            "error": f"Unknown material type: {params.material_type}",
            "missing_fields": [],
            "validation_messages": [],
        }

    rules = catalog_item["validation_rules"]
    missing_fields = []
    messages = []

    for field in catalog_item["required_fields"]:
        if not params.specifications.get(field):
            missing_fields.append(field)
            if field in rules:
                messages.append(rules[field]["message"])

    for field, value in params.specifications.items():
        rule = rules.get(field)
        if rule and rule["type"] == "enum" and value not in rule["values"]:
            messages.append(f"Invalid {field}: {value}. Valid options: {', '.join(rule['values'])}")

    return {
        "is_valid": not missing_fields,
        "missing_fields": missing_fields,
        "validation_messages": messages,
        "material_name": catalog_item["name"],
        "next_required_field": missing_fields[0] if missing_fields else None,
    }


def add_to_cart(params: AddToCartArguments, context: ToolContext) -> Dict[str, Any]:
    cart = _cart(context)
    quantity = params.quantity or 1
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    item_id = f"item_{int(time.time() * 1000)}_{suffix}"

    cart_item = {
        "id": item_id,
        "material_type": params.material_type,
        "specifications": params.specifications,
        "quantity": quantity,
        "status": "confirmed",
        "missing_fields": [],
    }
    cart.append(cart_item)

    name = _material_name(params.material_type)
    return {
        "success": True,
        "item_id": item_id,
        "cart_item": cart_item,
        "material_name": name,
        "cart_total_items": len(cart),
        "message": f"Added {quantity}x {name} to your cart",
    }


def view_cart(params: ViewCartArguments, context: ToolContext) -> Dict[str, Any]:
    cart = _cart(context)
    return {
        "cart_items": [
            {
                "id": item["id"],
                "material_name": _material_name(item["material_type"]),
                "quantity": item.get("quantity") or 1,
                "specifications": item["specifications"],
                "status": item["status"],
            }
            for item in cart
        ],
        "total_items": len(cart),
        "total_line_items": _line_items(cart),
        "is_empty": not cart,
    }


def remove_from_cart(params: RemoveFromCartArguments, context: ToolContext) -> Dict[str, Any]:
    cart = _cart(context)
    remaining = [item for item in cart if item["id"] != params.item_id]
    removed = len(remaining) < len(cart)
    cart[:] = remaining
    return {"success": removed, "removed": removed, "remaining_items": len(cart)}


def submit_order(params: SubmitOrderArguments, context: ToolContext) -> Dict[str, Any]:
    cart = _cart(context)
    if not cart:
        return {"success": False, "error": "Cannot submit empty cart"}

    order_number = f"KT-{int(time.time() * 1000)}"
    order_summary = {
        "order_number": order_number,
        "items": [
            {
                "material_name": _material_name(item["material_type"]),
                "quantity": item.get("quantity") or 1,
                "specifications": item["specifications"],
            }
            for item in cart
        ],
        "delivery_details": {
            "address": params.delivery_address,
            "requested_date": params.delivery_date,
            "special_instructions": params.special_instructions,
        },
        "total_line_items": _line_items(cart),
        "submitted_at": datetime.now(timezone.utc).isoformat(),
    }
    cart.clear()
    context.add_breadcrumb("Order submitted", {"order_number": order_number})

    return {
        "success": True,
        "order_number": order_number,
        "order_summary": order_summary,
        "message": f"Order {order_number} submitted successfully! You'll receive a confirmation email shortly.",
    }


INSTRUCTIONS = """You are Kojo's material ordering assistant. Be concise and efficient.

# Core Tasks
- Parse material requests with parseMaterialRequest
- Identify missing specs with validateMaterialSpecs
- Ask for the next required field, one question at a time
- Manage the cart (addToCart, viewCart, removeFromCart)
- Submit orders with submitOrder once you have a delivery address

# Important Rules
- Pipes and lumber come in standard lengths (10ft, 20ft)
- Always ask for QUANTITY (number of pieces), not total length
- If the user says "100 ft of pipe", clarify: "How many 10ft pieces?"
- Never call a tool with empty or placeholder values

# Example
User: "I need PVC pipe"
You: "Diameter? (1/2", 3/4", 1", 2", 4")"
User: "2 inch"
You: "Length? (10ft or 20ft)"

Keep responses under 20 words when possible.
"""


def build_agents() -> List[AgentDefinition]:
    tools = [
        ToolDefinition(
            name="parseMaterialRequest",
            description=(
                "Parse a natural language material request and identify the material type "
                "and any provided specifications"
            ),
            parameters=ParseRequestArguments,
            execute=parse_material_request,
        ),
        ToolDefinition(
            name="validateMaterialSpecs",
            description="Validate material specifications against catalog requirements and identify missing fields",
            parameters=ValidateSpecsArguments,
            execute=validate_material_specs,
        ),
        ToolDefinition(
            name="addToCart",
            description="Add a validated material item to the cart",
            parameters=AddToCartArguments,
            execute=add_to_cart,
        ),
        ToolDefinition(
            name="viewCart",
            description="Display current cart contents",
            parameters=ViewCartArguments,
            execute=view_cart,
        ),
        ToolDefinition(
            name="removeFromCart",
            description="Remove an item from the cart",
            parameters=RemoveFromCartArguments,
            execute=remove_from_cart,
        ),
        ToolDefinition(
            name="submitOrder",
            description="Submit the complete order for processing",
            parameters=SubmitOrderArguments,
            execute=submit_order,
        ),
    ]
    return [
        AgentDefinition(
            name="intelligentMaterialOrdering",
            voice="coral",
            instructions=INSTRUCTIONS,
            tools=tools,
        )
    ]
