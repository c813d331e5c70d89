import os

import dotenv

from langchain_core.messages import HumanMessage, SystemMessage
from ai_paralegal_sdk import AiParalegalClient, ChatAiParalegal

dotenv.load_dotenv()

with AiParalegalClient() as client:
    session = client.start_session(os.environ["AI_PARALEGAL_EXCHANGE_TOKEN"])

model = ChatAiParalegal(
    session_token=session.session_token,
    provider="openai",
    temperature=0.3,
    max_tokens=300,
)

res = model.invoke([
    SystemMessage(content="You are a concise paralegal assistant."),
    HumanMessage(content="Explain in one paragraph what a statute of limitations is."),
])

print(res.content, "\n")
print("Usage:", res.usage_metadata)
