"""Prompt templates for the three generation stages."""

from typing import Optional

HTML_FROM_IMAGE_PROMPT = (
    "Generate semantic HTML for this design. Include all necessary elements "
    "and structure for a web component. {prompt}"
)

HTML_FROM_FIGMA_PROMPT = """Generate semantic HTML for this Figma design. Include all necessary elements and structure for a web component.

Design Details:
{design_description}

Additional context: {prompt}

Return only the HTML code without any explanations."""

# Reference component shown to the model; it compiles against sitecore-jss-nextjs.
COMPONENT_EXEMPLAR = """import React from 'react';
import { Text, RichText, Field, Link, ImageField, LinkField, Image as JssImage } from '@sitecore-jss/sitecore-jss-nextjs';
// Initialize TypeScript interfaces for the fields
interface HeroTestingProps {
  fields: {
    Title: Field<string>;
    Description: Field<string>;
    Image: ImageField;
    Link1: LinkField;
    Link2: LinkField;
  };
}
// Define the HeroTesting function as a TypeScript Functional Component
const HeroTesting: React.FC<HeroTestingProps> = ({ fields }) => {
  return (
    <section className="flex bg-blue-800 text-white">
      <div className="p-5 flex-1">
        <Text tag="h1" field={fields.Title} className="text-4xl font-bold"/>
        <RichText field={fields.Description} className="mt-1 mb-3 text-lg"/>
        <div className="flex space-x-4">
          <Link field={fields.Link1} className="bg-white text-blue-800 px-4 py-2 rounded-md"/>
        </div>
      </div>
      <div className="flex-1 border-l-5 border-blue-900">
        <JssImage field={fields?.Image} layout="fill"/>
      </div>
    </section>
  );
};
// Export the component to be used in the rest of the app
export default HeroTesting;"""

COMPONENT_PROMPT = """Create a NextJS component named "{component_name}" with Tailwind CSS integration. Return only the component code without any explanations. The component should:
1. Use proper TypeScript types
2. Use Tailwind CSS classes for styling
3. Include proper imports for Sitecore Headless with Next JS and Tailwind
4. Follow Sitecore Headless with Next JS component structure with Field components
5. Include responsive design with Tailwind breakpoints
6. Use Tailwind's utility classes for layout, spacing, colors, and typography
7. Below is example of a Hero component which is error free and you can use it as a reference:
{exemplar}

HTML: {html}"""

FIELDS_PROMPT = """Generate Sitecore field definitions in JSON format for a "{component_name}" component. Based on this HTML, create fields that would be needed to populate the content. Include field types, descriptions, and validation rules. Return ONLY the JSON object without any explanations or markdown formatting.

Example format:
{{
  "fields": {{
    "title": {{
      "type": "Single-Line Text",
      "description": "Main title of the component",
      "validation": "Required"
    }}
  }}
}}

HTML to analyze: {html}"""


def html_from_image_prompt(prompt: Optional[str]) -> str:
    return HTML_FROM_IMAGE_PROMPT.format(prompt=prompt or "")


def html_from_figma_prompt(design_description: str, prompt: Optional[str]) -> str:
    return HTML_FROM_FIGMA_PROMPT.format(
        design_description=design_description,
        prompt=prompt or "",
    )


def component_prompt(component_name: str, html: str) -> str:
    return COMPONENT_PROMPT.format(
        component_name=component_name,
        exemplar=COMPONENT_EXEMPLAR,
        html=html,
    )


def fields_prompt(component_name: str, html: str) -> str:
    return FIELDS_PROMPT.format(component_name=component_name, html=html)
