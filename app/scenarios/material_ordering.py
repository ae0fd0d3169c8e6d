"""
Material ordering scenario: order validation plus an emergency procurement desk.
"""

import time
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from app.agents.graph import AgentDefinition
from app.agents.tools import ToolArguments, ToolContext, ToolDefinition

COMPANY_NAME = "Kojo Technologies"

MOCK_UNIT_PRICE = 15
EMT_STICK_ADVICE = "EMT conduit is sold in 10-foot lengths. Consider ordering in multiples of 10."
EMT_MINIMUM_WARNING = "EMT conduit comes in 10ft sticks. You may want to order 10ft minimum."


class MaterialSpecifications(ToolArguments):
    size: Optional[str] = Field(default=None, description='Size specification (e.g., "1/2 inch", "12 AWG")')
    grade: Optional[str] = Field(default=None, description='Material grade or type (e.g., "THHN", "Schedule 40")')
    rating: Optional[str] = Field(default=None, description="Voltage, pressure, or other ratings")


class ProjectInfo(ToolArguments):
    project_name: Optional[str] = None
    job_site_address: Optional[str] = None
    delivery_date: Optional[str] = None
    budget_code: Optional[str] = None


class ValidateOrderArguments(ToolArguments):
    material_type: str = Field(..., description='Type of material (e.g., "EMT conduit", "THHN wire", "copper pipe")')
    specifications: Optional[MaterialSpecifications] = None
    quantity: float = Field(..., description="Quantity needed")
    units: str = Field(..., description="Units (ft, pieces, rolls, etc.)")
    project_info: Optional[ProjectInfo] = None


class AvailabilityArguments(ToolArguments):
    material_description: str = Field(..., description="Complete material description with specifications")
    quantity: float = Field(..., description="Quantity needed")
    zip_code: Optional[str] = Field(default=None, description="Delivery zip code for vendor search")
    urgency: Optional[Literal["standard", "rush", "emergency"]] = Field(
        default=None, description="Delivery urgency level"
    )


class OrderDetails(ToolArguments):
    material_description: str
    quantity: float
    unit_price: Optional[float] = None
    vendor_name: str
    delivery_address: str
    delivery_date: Optional[str] = None
    project_code: Optional[str] = None


class CreateOrderArguments(ToolArguments):
    order_details: OrderDetails
    approval_needed: bool = Field(default=False, description="Whether order requires manager approval")


class EmergencySearchArguments(ToolArguments):
    material_needed: str = Field(..., description="What material is urgently needed")
    location: str = Field(..., description="Job site or pickup location")
    max_distance: Optional[float] = Field(default=None, description="Maximum distance willing to travel (miles)")


def validate_material_order(params: ValidateOrderArguments, context: ToolContext) -> Dict[str, Any]:
    """Check an order for missing details and material-specific issues."""
    specs = params.specifications or MaterialSpecifications()
    project = params.project_info or ProjectInfo()
    material = params.material_type.lower()

    result = {"isValid": True, "warnings": [], "suggestions": [], "missing_fields": []}

    def missing(field: str, blocking: bool = True) -> None:
        result["missing_fields"].append(field)
        if blocking:
            result["isValid"] = False

    if not specs.size:
        missing("size specification")
    if not project.job_site_address:
        missing("delivery address")
    if not project.delivery_date:
        missing("delivery date")

    if "emt" in material:
        if 0 < params.quantity < 10:
            result["warnings"].append(EMT_MINIMUM_WARNING)
        result["warnings"].append(EMT_STICK_ADVICE)
        result["suggestions"].append(EMT_STICK_ADVICE)

    if "wire" in material:
        if not specs.grade:
            missing("wire type (THHN, Romex, etc.)")
        if not specs.rating:
            missing("voltage rating", blocking=False)

    return {
        "validation_result": result,
        "estimated_cost": params.quantity * MOCK_UNIT_PRICE,
        "availability": "In stock at 3 vendors",
    }


def check_material_availability(params: AvailabilityArguments, context: ToolContext) -> Dict[str, Any]:
    emergency = params.urgency == "emergency"
    vendors = [
        {
            "name": "ABC Electrical Supply",
            "price_per_unit": 14.5,
            "in_stock": True,
            "delivery_time": "Same day" if emergency else "2-3 days",
            "minimum_order": 10,
            "distance": "2.3 miles",
        },
        {
            "name": "Metro Building Supply",
            "price_per_unit": 13.75,
            "in_stock": True,
            "delivery_time": "Next day" if emergency else "1-2 days",
            "minimum_order": 5,
            "distance": "4.1 miles",
        },
        {
            "name": "Professional Trade Supply",
            "price_per_unit": 15.25,
            "in_stock": False,
            "delivery_time": "5-7 days",
            "minimum_order": 1,
            "distance": "1.8 miles",
            "note": "Can special order",
        },
    ]
    in_stock = [v for v in vendors if v["in_stock"]]
    return {
        "material": params.material_description,
        "quantity": params.quantity,
        "vendors": vendors,
        "best_price": min(v["price_per_unit"] for v in in_stock),
        "fastest_delivery": in_stock[0]["delivery_time"],
    }


def create_material_order(params: CreateOrderArguments, context: ToolContext) -> Dict[str, Any]:
    details = params.order_details
    po_number = f"PO-{str(int(time.time() * 1000))[-6:]}"
    context.add_breadcrumb("Purchase order created", {"purchase_order_number": po_number})
    return {
        "purchase_order_number": po_number,
        "status": "Pending Approval" if params.approval_needed else "Confirmed",
        "total_cost": details.quantity * (details.unit_price or MOCK_UNIT_PRICE),
        "estimated_delivery": details.delivery_date,
        "tracking_info": f"Order {po_number} created successfully",
        "next_steps": (
            "Sent to project manager for approval"
            if params.approval_needed
            else "Order sent to vendor, tracking will be provided"
        ),
    }


def emergency_vendor_search(params: EmergencySearchArguments, context: ToolContext) -> Dict[str, Any]:
    return {
        "urgent_suppliers": [
            {
                "name": "QuickStop Electrical",
                "distance": "1.2 miles",
                "phone": "(555) 123-4567",
                "has_item": True,
                "pickup_ready": "15 minutes",
                "price": "$89",
            },
            {
                "name": "24/7 Supply Depot",
                "distance": "3.4 miles",
                "phone": "(555) 987-6543",
                "has_item": True,
                "pickup_ready": "30 minutes",
                "price": "$95",
            },
        ],
        "recommendation": "QuickStop Electrical - closest and fastest",
    }


MATERIAL_ORDERING_INSTRUCTIONS = """You are a material ordering specialist at Kojo Technologies. Help contractors place accurate, complete material orders with proper validation.

# Order Validation Process
1. Extract material type, quantity, size and specifications from the request.
2. Call validateMaterialOrder and ask for every missing field it reports: specifications, quantity and units, job site address, delivery date, budget code.
3. Use checkMaterialAvailability to present pricing, delivery times and alternatives.
4. Confirm the details with the contractor, then call createMaterialOrder.

# Material Notes
- EMT conduit: size (1/2", 3/4", 1"), sold in 10ft sticks.
- Wire: AWG size, type (THHN, Romex), voltage rating, length.
- Pipe: material (copper, PVC, PEX), diameter, length, pressure rating.

# Rules
- Never call a tool with empty or placeholder values. Ask the contractor instead.
- If the job site is down or the need is urgent, hand off to emergencyProcurement.

Sample: User: "Need 100 ft of 1/2 EMT". You: "EMT comes in 10-foot sticks, so that's 10 pieces. What's the job site address for delivery, and when do you need this?"
"""

EMERGENCY_INSTRUCTIONS = """You are an emergency procurement specialist at Kojo Technologies. You handle URGENT material needs when job sites are down.

1. Assess urgency: why is this urgent and is work stopped?
2. Get the minimum: what exactly is needed and where.
3. Call emergencyVendorSearch and present the closest supplier with stock.
4. Prefer pickup when it is faster. Hand back to materialOrdering for non-urgent follow-up orders.
"""


def build_agents() -> List[AgentDefinition]:
    return [
        AgentDefinition(
            name="materialOrdering",
            voice="ballad",
            instructions=MATERIAL_ORDERING_INSTRUCTIONS,
            tools=[
                ToolDefinition(
                    name="validateMaterialOrder",
                    description="Validate a material order for completeness and accuracy",
                    parameters=ValidateOrderArguments,
                    execute=validate_material_order,
                ),
                ToolDefinition(
                    name="checkMaterialAvailability",
                    description="Check availability and pricing for materials across vendors",
                    parameters=AvailabilityArguments,
                    execute=check_material_availability,
                ),
                ToolDefinition(
                    name="createMaterialOrder",
                    description="Create a purchase order for validated materials",
                    parameters=CreateOrderArguments,
                    execute=create_material_order,
                ),
            ],
            handoffs=["emergencyProcurement"],
            handoff_description="Specialist for material ordering with comprehensive validation and vendor management",
        ),
        AgentDefinition(
            name="emergencyProcurement",
            voice="ash",
            instructions=EMERGENCY_INSTRUCTIONS,
            tools=[
                ToolDefinition(
                    name="emergencyVendorSearch",
                    description="Find vendors with immediate availability for emergency orders",
                    parameters=EmergencySearchArguments,
                    execute=emergency_vendor_search,
                )
            ],
            handoffs=["materialOrdering"],
            handoff_description="Emergency procurement for urgent material needs and job site emergencies",
        ),
    ]
