import asyncio
import contextlib
import os
import sys

# Add src to path for running directly
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from coreason_myinfo import AuthorisationRequest, CoreasonMyInfoError, MyInfoClientAsync, MyInfoClientConfig


async def main() -> None:
    """
    Walks through a MyInfo login against the staging environment:
    - build the SingPass redirect URL
    - exchange the authorisation code passed back to the redirect endpoint
    - retrieve the consented Person attributes
    """
    print(">>> Starting MyInfo login example")

    # Reads COREASON_MYINFO_* environment variables for anything not given here
    config = MyInfoClientConfig(mode="stg")

    attributes = ["uinfin", "name", "email", "mobileno", "vehicles.vehicleno"]
    request = AuthorisationRequest(
        purpose="Demonstrating MyInfo",
        requested_attributes=attributes,
        relay_state="example-state",
    )

    async with MyInfoClientAsync(config) as client:
        print(f">>> Send the user to:\n    {client.create_redirect_url(request)}")

        auth_code = input(">>> Paste the 'code' query parameter from the redirect: ").strip()
        try:
            result = await client.get_person(auth_code, attributes)
        except CoreasonMyInfoError as e:
            print(f">>> Retrieval failed ({type(e).__name__}): {e}")
            return

        print(f">>> Retrieved attributes: {sorted(result.data)}")


if __name__ == "__main__":
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(main())
