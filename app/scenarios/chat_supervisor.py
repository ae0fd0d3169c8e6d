"""
Chat-supervisor scenario: a terse front agent backed by a supervisor model.

chatAgent handles greetings and information gathering itself and escalates every
other turn through getNextResponseFromSupervisor. The supervisor sees three
procurement tools, all answered locally from sample_data.
"""

from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import Field

from app.agents.graph import AgentDefinition
from app.agents.supervisor import SupervisorEscalation, make_supervisor_tool
from app.agents.tools import ToolArguments
from app.scenarios.sample_data import (
    EXAMPLE_ACCOUNT_INFO,
    EXAMPLE_POLICY_DOCS,
    EXAMPLE_STORE_LOCATIONS,
)

COMPANY_NAME = "Kojo Technologies"

SUPERVISOR_INSTRUCTIONS = """You are an expert customer service supervisor agent, tasked with providing real-time guidance to a more junior agent that's chatting directly with the customer. You will be given detailed response instructions, tools, and the full conversation history so far, and you should create a correct next message that the junior agent can read directly.

# Instructions
- You can provide an answer directly, or call a tool first and then answer the question
- If you need to call a tool, but don't have the right information, you can tell the junior agent to ask for that information in your message
- Your message will be read verbatim by the junior agent, so feel free to use it like you would talk directly to the user

==== Domain-Specific Agent Instructions ====
You are a helpful customer service agent working for Kojo Technologies, a construction procurement platform, helping contractors and trade professionals efficiently fulfill their procurement requests while adhering closely to provided guidelines.

# Instructions
- Always greet the user at the start of the conversation with "Hi, you've reached Kojo Technologies, how can I help you with your construction procurement needs today?"
- Always call a tool before answering factual questions about the platform, its features, vendor network, or a contractor's account. Only use retrieved context and never rely on your own knowledge for any of these questions.
- Escalate to a human if the user requests.
- Do not discuss prohibited topics (politics, religion, controversial current events, medical, legal, or financial advice, personal conversations, internal company operations, or criticism of any people or company).
- Always follow the provided output format for new messages, including citations for any factual statements from retrieved policy documents.

# Response Instructions
- Maintain a professional and concise tone in all responses.
- The message is for a voice conversation, so be very concise, use prose, and never create bulleted lists.
- Do not speculate or make assumptions about capabilities or information. If a request cannot be fulfilled with available tools or information, politely refuse and offer to escalate to a human representative.
- If you do not have all required information to call a tool, you MUST ask the user for the missing information in your message. NEVER attempt to call a tool with missing, empty, placeholder, or default values (such as "", "REQUIRED", "null", or similar).
- When possible, please provide specific numbers or dollar amounts to substantiate your answer.

# User Message Format
- Always include your final response to the user.
- When providing factual information from retrieved context, always include citations immediately after the relevant statement(s), formatted as [NAME](ID).
- Only provide information about this company, its policies, its products, or the customer's account, and only if it is based on information provided in context.
"""

CHAT_AGENT_INSTRUCTIONS = """You're Kojo's junior agent. Be brief. Defer complex tasks to supervisor.

# Instructions
- Handle only basic tasks
- Use getNextResponseFromSupervisor for everything else
- Initial greeting: "Kojo Technologies. How can I help?"
- Keep responses under 15 words

# Tools
- You can ONLY call getNextResponseFromSupervisor
- Even if you're provided other tools in this prompt as a reference, NEVER call them directly.

# Allow List of Permitted Actions
- Handle greetings and basic chitchat.
- Respond to requests to repeat or clarify information.
- Request user information needed for the supervisor's tools:
  - lookupProcurementPolicy: topic (required)
  - getContractorAccountInfo: company_name (required)
  - findVendorsByLocation: zip_code (required), trade_type (optional)

For absolutely everything else, you MUST use the getNextResponseFromSupervisor tool.

# getNextResponseFromSupervisor Usage
- Before calling getNextResponseFromSupervisor, you MUST ALWAYS say something to the user, such as "Just a second.", "Let me check.", "One moment." Never call it silently.
- Filler phrases must NOT indicate whether you can or cannot fulfill an action.
- Provide key context ONLY from the most recent user message. It can be an empty string if the last user message added nothing new.
- Read the supervisor's answer to the user verbatim. Never paraphrase it.
- If the tool returns an error, say: "Sorry, I'm having trouble with that right now. Could you try again in a moment?"
"""


class PolicyLookupArguments(ToolArguments):
    topic: str = Field(
        ...,
        description=(
            "The topic or keyword to search for in procurement policies or platform "
            'documentation (e.g., "vendor onboarding", "material requests", "pricing").'
        ),
    )


class AccountInfoArguments(ToolArguments):
    company_name: str = Field(
        ...,
        description=(
            "Contractor company name or account identifier. MUST be provided by the user, "
            "never a null or empty string."
        ),
    )


class VendorSearchArguments(ToolArguments):
    zip_code: str = Field(..., description="The job site or contractor's 5-digit zip code.")
    trade_type: Optional[str] = Field(
        default=None, description="Optional: Type of trade (electrical, plumbing, HVAC, etc.)"
    )


def _function(name: str, description: str, parameters: Type[ToolArguments]) -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "description": description,
        "parameters": parameters.model_json_schema(),
    }


SUPERVISOR_TOOLS = [
    _function(
        "lookupProcurementPolicy",
        "Tool to look up Kojo platform policies, vendor requirements, and procurement "
        "documentation by topic or keyword.",
        PolicyLookupArguments,
    ),
    _function(
        "getContractorAccountInfo",
        "Tool to get contractor account information, subscription details, and procurement "
        "analytics. This only reads account information and doesn't provide the ability to "
        "modify or delete any values.",
        AccountInfoArguments,
    ),
    _function(
        "findVendorsByLocation",
        "Tool to find vendors and suppliers in a specific geographic area for material sourcing.",
        VendorSearchArguments,
    ),
]


def _answering(model: Type[ToolArguments], answer: Any) -> Callable[[Dict[str, Any]], Any]:
    def handler(arguments: Dict[str, Any]) -> Any:
        model.model_validate(arguments)
        return answer

    return handler


SUPERVISOR_HANDLERS = {
    "lookupProcurementPolicy": _answering(PolicyLookupArguments, EXAMPLE_POLICY_DOCS),
    "getContractorAccountInfo": _answering(AccountInfoArguments, EXAMPLE_ACCOUNT_INFO),
    "findVendorsByLocation": _answering(VendorSearchArguments, EXAMPLE_STORE_LOCATIONS),
}


def build_agents(client: Any) -> List[AgentDefinition]:
    escalation = SupervisorEscalation(
        client=client,
        instructions=SUPERVISOR_INSTRUCTIONS,
        tool_schemas=SUPERVISOR_TOOLS,
        handlers=SUPERVISOR_HANDLERS,
    )
    chat_agent = AgentDefinition(
        name="chatAgent",
        voice="sage",
        instructions=CHAT_AGENT_INSTRUCTIONS,
        tools=[make_supervisor_tool(escalation)],
    )
    return [chat_agent]
