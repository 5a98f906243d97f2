"""
Sample diagrams, one per supported dialect.
"""

BRANCHING_FLOWCHART = """flowchart TD
    A[User request] --> B{Authenticated?}
    B -->|Yes| C[Fetch data]
    B -->|No| D[Login screen]
    D --> E[Authenticate]
    E --> B
    C --> F{Cached?}
    F -->|Yes| G[Return cache]
    F -->|No| H[Query DB]
    H --> I[Store in cache]
    I --> G
    G --> J[Send response]"""

SEQUENCE_DIAGRAM = """sequenceDiagram
    participant U as User
    participant F as Frontend
    participant A as API
    participant D as Database

    U->>F: Click button
    F->>A: POST /api/data
    A->>D: SELECT * FROM users
    D-->>A: User rows
    A-->>F: JSON response
    F-->>U: Update screen"""

PIE_CHART = """pie title Tech stack usage
    "TypeScript" : 40
    "Python" : 25
    "Go" : 15
    "Rust" : 10
    "Other" : 10"""

STATE_DIAGRAM = """stateDiagram-v2
    [*] --> Idle
    Idle --> Loading : fetch()
    Loading --> Success : data received
    Loading --> Error : failure
    Success --> Idle : reset()
    Error --> Loading : retry()
    Error --> Idle : reset()"""

MINDMAP = """mindmap
    root((AI development))
        Frontend
            React
            Next.js
            TypeScript
        Backend
            Python
            FastAPI
            Django
        Infrastructure
            AWS
            Docker
            Kubernetes
        AI/ML
            PyTorch
            LangChain
            OpenAI"""

SAMPLES = {
    "flowchart": BRANCHING_FLOWCHART,
    "sequence": SEQUENCE_DIAGRAM,
    "pie": PIE_CHART,
    "state": STATE_DIAGRAM,
    "mindmap": MINDMAP,
}
