"""提示词模板加载与渲染。

按语言(locale) 从 prompts/<locale> 目录读取模板文本，
渲染出发给后端的完整 prompt。两类模板：

- conversation: 继续对话，回答用户最新一条消息。
- summary: 将当前会话压缩为 3-6 句摘要。

两类模板都要求后端只返回 ``{"reply": "..."}`` 形式的 JSON 对象。
渲染是输入的纯函数：相同的 history/input 总是得到相同的 prompt。
"""

from functools import lru_cache
from pathlib import Path
from string import Template


PROMPTS_DIR = Path(__file__).resolve().parent


@lru_cache(maxsize=None)
def load_template(name: str, locale: str = "en") -> Template:
    """加载 prompts/<locale>/<name>.md 模板。"""

    fname = PROMPTS_DIR / locale / f"{name}.md"
    return Template(fname.read_text(encoding="utf-8"))


def build_conversation_prompt(history: str, last_message: str, locale: str = "en") -> str:
    # Template 只做单次替换，history 中的 $ 或 {} 不会被再次解释
    return load_template("conversation", locale).substitute(
        history=history,
        last_message=last_message,
    )


def build_summary_prompt(history: str, locale: str = "en") -> str:
    return load_template("summary", locale).substitute(history=history)
