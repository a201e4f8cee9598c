#!/usr/bin/env python
"""Start the validation API server.

Bind address is configurable via environment variables:
- VALIDATION_HOST: Interface to bind (default: 0.0.0.0)
- VALIDATION_PORT: Port to listen on (default: 8000)
"""

if __name__ == "__main__":
    import os
    import uvicorn

    from main import app

    host = os.getenv("VALIDATION_HOST", "0.0.0.0")
    port = int(os.getenv("VALIDATION_PORT", "8000"))

    print("\n" + "="*60)
    print("Order Output Validator - Backend Server")
    print("="*60)
    print(f"Order validation: POST http://{host}:{port}/api/validation/order")
    print(f"JSON validation:  POST http://{host}:{port}/api/validation/json")
    print("="*60 + "\n")

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level="info"
    )
