import os
from pathlib import Path
from typing import Dict

class PromptManager:
    """
    Loads prompt templates from text files.

    Templates live in `connecto/core/prompts/` by default, one `<name>.txt`
    file per template.
    """

    def __init__(self, prompts_dir: str = None):
        """
        Initialize the PromptManager with the directory containing prompt templates.

        Args:
            prompts_dir: Path to the directory containing prompt templates.
                         If None, defaults to the prompts/ directory next to this file.
        """
        if prompts_dir is None:
            self.prompts_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'prompts')
        else:
            self.prompts_dir = prompts_dir

        self.templates: Dict[str, str] = {}
        self._load_templates()

    def _load_templates(self):
        """Load all template files from the prompts directory."""
        prompts_path = Path(self.prompts_dir)
        for template_file in prompts_path.glob('*.txt'):
            with open(template_file, 'r', encoding='utf-8') as f:
                self.templates[template_file.stem] = f.read()

    def get_template(self, template_name: str) -> str:
        """
        Get the raw template content by name.

        Raises:
            KeyError: If the template does not exist
        """
        if template_name not in self.templates:
            raise KeyError(f"Template '{template_name}' not found in {self.prompts_dir}")
        return self.templates[template_name]

# Create a singleton instance
prompt_manager = PromptManager()
