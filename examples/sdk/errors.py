from ai_paralegal_sdk import AiParalegalAPIError, AiParalegalClient, AiParalegalStreamError, LLM

try:
    client = AiParalegalClient(base_url="https://paralegal.example.com", api_key="anyway")
    client.start_session("expired-exchange-token")
    LLM(client, "not-a-session").stream("Hello")
except AiParalegalAPIError as e:
    if e.is_auth_error:
        print("Check AI_PARALEGAL_API_KEY or request a fresh exchange token.")
    elif e.is_server_error:
        print(f"Server error {e.status_code}, consider retrying.")
    else:
        print(e.to_dict())
except AiParalegalStreamError as e:
    print("The host reported an error mid-stream:", e.message, e.payload)
