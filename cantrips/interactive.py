"""交互式命令模块"""

from typing import Any, Dict

import questionary


def _text_default(value: Any) -> str:
    return "" if value is None else str(value)


def configure_project(config: Dict[str, Any]) -> Dict[str, Any]:
    """交互式配置项目基本信息

    注意：此函数不会询问密码和访问密钥，凭证请通过环境变量或 .env 文件提供。

    Args:
        config: 当前配置

    Returns:
        要更新的配置项
    """
    docker_config = config.get("docker", {})
    npm_config = config.get("npm", {})
    eb_config = config.get("eb", {})

    print("\n--- 基本项目配置 ---")
    print("注意：凭证不会写入配置文件，请通过环境变量或 .env 文件提供。\n")

    updated_config: Dict[str, Any] = {"docker": {}, "npm": {}, "eb": {}}

    # 镜像配置
    updated_config["docker"]["registry"] = (
        questionary.text("镜像仓库地址（可选）", default=_text_default(docker_config.get("registry"))).ask()
        or None
    )
    updated_config["docker"]["username"] = (
        questionary.text("仓库用户名（可选）", default=_text_default(docker_config.get("username"))).ask()
        or None
    )

    max_workers = questionary.text(
        "并行构建/推送的最大数量（留空使用CPU核数）",
        default=_text_default(docker_config.get("max_workers")),
        validate=lambda value: value == "" or (value.isdigit() and int(value) > 0) or "请输入正整数",
    ).ask()
    updated_config["docker"]["max_workers"] = int(max_workers) if max_workers else None

    # npm配置
    updated_config["npm"]["registry_url"] = (
        questionary.text(
            "npm仓库地址", default=_text_default(npm_config.get("registry_url", "registry.npmjs.org/"))
        ).ask()
        or "registry.npmjs.org/"
    )

    # 部署配置
    if questionary.confirm("是否配置Elastic Beanstalk部署规则?", default=bool(eb_config.get("pattern"))).ask():
        updated_config["eb"]["pattern"] = (
            questionary.text(
                "部署规则（分支名:环境名|分支名:环境名）", default=_text_default(eb_config.get("pattern"))
            ).ask()
            or None
        )

    return updated_config
