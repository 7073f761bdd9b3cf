import json
import os
import sys

# 将项目根目录添加到python路径
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from banyan.main import create_app


def dump_openapi(path="openapi_dump.json"):
    app = create_app()
    with open(path, "w", encoding="utf-8") as f:
        json.dump(app.openapi(), f, indent=2, ensure_ascii=False)
    print(f"OpenAPI spec dumped to {path}")


if __name__ == "__main__":
    dump_openapi()
